from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str

    access_token_secret: str
    access_token_expire_minutes: int = 15
    refresh_token_secret: str
    refresh_token_expire_days: int = 10
    jwt_algorithm: str = "HS256"

    cloudinary_cloud_name: str = ""
    cloudinary_api_key: str = ""
    cloudinary_api_secret: str = ""

    api_prefix: str = "/api/v1"
    cors_origin: str = "*"
    upload_temp_dir: str = "./public/temp"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

settings = Settings()
