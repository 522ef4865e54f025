import os
from typing import Optional

_MODULES = {
    "production": "config.production",
    "prod": "config.production",
    "testing": "config.testing",
    "test": "config.testing",
}


def get_settings_module(env: Optional[str] = None) -> str:
    # Môi trường lấy từ tham số hoặc biến APP_ENV, mặc định là 'development'
    env = (env or os.getenv("APP_ENV", "development")).strip().lower()

    # Các giá trị không nhận ra đều dùng cấu hình Development
    return _MODULES.get(env, "config.development")
