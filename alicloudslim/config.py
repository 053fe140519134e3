import os
import pathlib

from dotenv import load_dotenv, find_dotenv

# Prefer the .env in the project root (one level above this file)
package_dir = pathlib.Path(__file__).resolve().parent
project_root = package_dir.parent
root_env = project_root / ".env"
if root_env.exists():
    load_dotenv(dotenv_path=str(root_env), override=False)
else:
    # Locate nearest .env (walking up) and load if found
    _dotenv_path = find_dotenv(usecwd=True)
    if _dotenv_path:
        load_dotenv(_dotenv_path, override=False)

# Wuliu (logistics tracking)
WULIU_APP_CODE = os.getenv("WULIU_APP_CODE", "")
WULIU_API_URL = os.getenv("WULIU_API_URL", "https://wuliu.market.alicloudapi.com")

# Market (billing/ordering)
ALIYUN_ACCESS_KEY_ID = os.getenv("ALIYUN_ACCESS_KEY_ID", "")
ALIYUN_ACCESS_KEY_SECRET = os.getenv("ALIYUN_ACCESS_KEY_SECRET", "")
MARKET_API_URL = os.getenv("MARKET_API_URL", "https://market.aliyuncs.com/")
MARKET_API_VERSION = os.getenv("MARKET_API_VERSION", "2015-11-01")

# HTTP
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))
