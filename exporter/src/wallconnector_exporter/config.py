import os

from pydantic import BaseModel, Field


class ExporterSettings(BaseModel):
    target: str = "localhost:8081"
    request_timeout: float = Field(5.0, gt=0)
    scrape_timeout: float = Field(10.0, gt=0)
    host: str = "localhost"
    port: int = Field(8080, gt=0, lt=65536)
    metrics_path: str = "/metrics"
    namespace: str = "wallconnector"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "ExporterSettings":
        return cls(
            target=os.getenv("WALLCONNECTOR_TARGET", "localhost:8081"),
            request_timeout=os.getenv("WALLCONNECTOR_TIMEOUT", "5"),
            scrape_timeout=os.getenv("EXPORTER_SCRAPE_TIMEOUT", "10"),
            host=os.getenv("EXPORTER_HOST", "localhost"),
            port=os.getenv("EXPORTER_PORT", "8080"),
            metrics_path=os.getenv("EXPORTER_METRICS_PATH", "/metrics"),
            namespace=os.getenv("EXPORTER_NAMESPACE", "wallconnector"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
