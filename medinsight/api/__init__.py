"""API 路由"""
from .routes import router
