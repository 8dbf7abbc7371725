from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env")

    app_name: str = "GuessACard"
    debug: bool = False

    database_url: str = "sqlite+aiosqlite:///./guessacard.db"

    # Directory path or http(s) base URL holding the dataset JSON files
    data_source: str = "data"
    tags_file: str = "tags.json"

    close_threshold: float = 200
    max_links_per_card: int = 20
    link_visibility_threshold: float = 50

    # "pairwise" sums every rule per pair, "grouped" scores within rule groups
    synergy_mode: str = "pairwise"


settings = Settings()


# =============================================================================
# DATASET FRAGMENTS
# =============================================================================

# The core fragment is always loaded and is the only one flagging core-set cards
CORE_FRAGMENT = "core"

BUILTIN_FRAGMENTS: dict[str, str] = {
    "core": "core.json",
    "expPack1": "pack1JunBeiJingSai.json",
    "expPack2": "pack2ZuoZhanJiHua.json",
    "expPack3": "pack3JuanTuChongLai.json",
    "expPack4": "pack4ShiBuWoDai.json",
    "expPack5": "pack5ChongZhuangShangZhen.json",
    "expPack6": "pack6QiongBingDuWu.json",
    "expPack7": "pack7YiNianZhiCha.json",
    "expPack8": "pack8MuChangZhiZhan.json",
    "expPack9": "pack9ShenJingBaiZhan.json",
    "expPackDuo1": "packDuo1TongLuanShuangGou.json",
}
