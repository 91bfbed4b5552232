from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Perplexity answer engine
    perplexity_api_key: str = ""
    perplexity_api_url: str = "https://api.perplexity.ai/chat/completions"
    perplexity_model: str = "sonar-pro"
    request_timeout_seconds: float = 90.0

    # Query generation
    default_num_prompts: int = 5
    max_num_prompts: int = 50
    generation_temperature: float = 0.7

    # Analysis
    analysis_temperature: float = 0.1
    answer_max_chars: int = 3000  # Answer text embedded in the classification prompt

    # Pipeline pacing
    analysis_delay_seconds: float = 0.8  # Pause between per-query analyses
    generation_delay_seconds: float = 0.6  # Pause after queries are generated
    analysis_concurrency: int = 1  # 1 = strictly sequential

    # App
    app_env: str = "development"
    app_debug: bool = True
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    # CORS
    allowed_origins: str = "*"  # comma-separated, e.g. "https://grader.example.com"

    # Logging
    log_level: str = "INFO"
    log_json: bool = False  # set True in production for structured JSON logs

    # Sentry
    sentry_dsn: str = ""  # leave empty to disable


settings = Settings()
