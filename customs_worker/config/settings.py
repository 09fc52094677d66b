from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "customs"
    db_username: str = "customs"
    db_password: str = "secret"
    db_pool_max_size: int = 10

    redis_url: str = ""
    redis_socket_timeout_seconds: float = 5.0
    ocr_queue_name: str = "queue:ocr"
    ocr_job_attempts: int = 3
    ocr_job_backoff_seconds: int = 30
    ocr_result_ttl_seconds: int = 3600
    ocr_failure_ttl_seconds: int = 7 * 24 * 3600

    customs_label_map_path: str = ""
    customs_label_map_reload_interval_seconds: float = 0.0

    customs_base_url: str = "https://www.customs.gov.vn"
    customs_list_url: str = (
        "https://www.customs.gov.vn/index.jsp?pageId=8&cid=1294&LinhVuc=313"
    )
    scraper_max_pages: int = 10
    http_timeout_seconds: float = 20.0
    http_user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
    )

    pdf_engine: str = "pdfplumber"
