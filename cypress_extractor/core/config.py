from functools import cache
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import ClassVar, List


class Settings(BaseSettings):
    # --------------------------------------------------------------
    # Application Metadata
    # --------------------------------------------------------------
    APP_NAME: str = "Cypress Test Structure Extractor"
    VERSION: str = "1.0.0"

    # --------------------------------------------------------------
    # MongoDB Configuration (API audit logs only)
    # An empty URI disables audit storage.
    # --------------------------------------------------------------
    MONGO_URI: str = ""
    MONGO_DB: str = "cypress_extractor"

    COLLECTION_API_LOGS: ClassVar[str] = "api_logs"

    # --------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------
    LOG_LEVEL: str = "INFO"

    # --------------------------------------------------------------
    # Upload limits
    # --------------------------------------------------------------
    MAX_UPLOAD_MB: int = 8
    MAX_ZIP_SIZE_MB: int = 50
    MAX_ZIP_TOTAL_UNCOMPRESSED_MB: int = 200
    MAX_ZIP_FILE_COUNT: int = 5000
    MAX_SINGLE_FILE_MB: int = 8

    # --------------------------------------------------------------
    # Analysis defaults
    # --------------------------------------------------------------
    MAX_WORKERS: int = 4
    INCLUDE_NESTED_CALLS: bool = True
    ENABLE_SCENARIOS: bool = False

    # --------------------------------------------------------------
    # Test-suite vocabulary
    # --------------------------------------------------------------
    COMMAND_REGISTRATION_PATH: str = "Cypress.Commands.add"
    COMMAND_ROOT: str = "cy"
    TEST_IDENTIFIERS: List[str] = ["it"]
    SUITE_IDENTIFIERS: List[str] = ["describe"]
    HOOK_NAMES: List[str] = ["before", "beforeEach", "after", "afterEach"]
    SCENARIO_PREFIX: str = "expectStandardScenariosFor"
    SCENARIO_FN_SUFFIX: str = "Fn"

    # --------------------------------------------------------------
    # Pydantic Settings (Pydantic v2)
    # --------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )


@cache
def get_settings() -> Settings:
    return Settings()
