from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "MaiSpec API"
    app_env: str = "development"
    app_host: str = "0.0.0.0"
    app_port: int = 8100
    cors_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = True
    log_level: str = "INFO"
    request_id_header: str = "X-Request-ID"

    # Remote collaborators: the generation backend and the document export backend.
    generation_base_url: str = "http://localhost:8000"
    export_base_url: str = "http://localhost:8000"
    collaborator_timeout_seconds: float = 120.0
    default_model_choice: str = "models/gemini-2.5-flash"
    requested_sections: str = (
        "Purpose, Functional Requirements, Non-Functional Requirements, Constraints, "
        "Out of Scope, Risks & Mitigations, Open Questions, Use Cases"
    )
    max_upload_file_bytes: int = 10 * 1024 * 1024

    highlight_limit: int = 4
    intro_sentences: int = 3
    summary_sentences: int = 4
    use_case_fallback_count: int = 5
    default_title: str = "Requirements"
    fallback_artifact_name: str = "requirements"
    # Optional JSON file replacing the built-in non-functional keyword tables.
    taxonomy_path: str = ""

    model_config = SettingsConfigDict(
        env_prefix="MAISPEC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()
