"""Agents - 解读 Agent 与流水线调度"""
from .narrative_agent import NarrativeAgent, create_chat_llm
from .orchestrator import AnalysisOrchestrator
