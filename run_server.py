#!/usr/bin/env python3
"""
MedInsight 服务启动脚本
"""

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(PROJECT_ROOT))


def main():
    import uvicorn
    from medinsight.core.config import settings
    from medinsight.core.exceptions import ConfigurationError
    
    try:
        settings.require_credentials()
    except ConfigurationError as e:
        print(f"❌ {e.message}")
        print("请在环境变量或 .env 文件中设置 (参考 .env.example)")
        sys.exit(1)
    
    print("=" * 50)
    print(f"🏥 {settings.APP_NAME} - FastAPI 后端服务")
    print(f"   http://{settings.HOST}:{settings.PORT}{settings.API_PREFIX}/analyze-image")
    print("=" * 50)
    
    uvicorn.run(
        "medinsight.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_level=settings.LOG_LEVEL.lower()
    )

if __name__ == "__main__":
    main()
