"""
MedInsight - 医学影像 AI 解读服务
主应用入口
"""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from medinsight.core.config import settings
from medinsight.core.logging import logger
from medinsight.core.exceptions import InputValidationError, MedInsightException
from medinsight.agents import AnalysisOrchestrator
from medinsight.api import router


def create_app(orchestrator: Optional[AnalysisOrchestrator] = None) -> FastAPI:
    """
    创建 FastAPI 应用
    
    Args:
        orchestrator: 预先构建的调度器 (可选)。未提供时在启动阶段按配置构建，
            凭证缺失会使启动失败。
    """
    
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
# MedInsight - 医学影像 AI 解读服务

## 功能特性
- **图像预处理**: 统一缩放为 224x224 JPEG
- **图像分类**: Hugging Face Inference 图像分类模型
- **患者解读**: Groq LLM 生成面向患者的解读
- **报告合成**: 置信度摘要 + 解读 + 免责声明

## API 版本
v1.0.0
        """,
        docs_url="/docs",
        redoc_url="/redoc"
    )
    
    app.state.orchestrator = orchestrator
    
    # CORS 配置
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    
    # 注册路由
    app.include_router(router, prefix=settings.API_PREFIX)
    
    @app.exception_handler(MedInsightException)
    async def medinsight_exception_handler(request: Request, exc: MedInsightException):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": exc.message,
                "code": exc.code,
                "stage": exc.stage.value if exc.stage else None
            }
        )
    
    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        # 表单字段类型错误 (如 image 以文本字段提交) 与缺失字段同样按 400 处理
        logger.warning(f"请求参数校验失败: {exc.errors()}")
        return await medinsight_exception_handler(request, InputValidationError("Missing image or type"))
    
    @app.on_event("startup")
    async def startup_event():
        logger.info(f"🏥 {settings.APP_NAME} 启动中...")
        if app.state.orchestrator is None:
            app.state.orchestrator = AnalysisOrchestrator.from_settings(settings)
        logger.info(f"🤖 分类模型: MRI={settings.MRI_CLASSIFIER_MODEL}, XRAY={settings.XRAY_CLASSIFIER_MODEL}")
        logger.info(f"💬 对话模型: {settings.LLM_MODEL}")
        logger.info(f"🔧 调试模式: {settings.DEBUG}")
    
    @app.on_event("shutdown")
    async def shutdown_event():
        logger.info(f"🏥 {settings.APP_NAME} 关闭中...")
    
    @app.get("/")
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "docs": "/docs"
        }
    
    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}
    
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "medinsight.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG
    )
