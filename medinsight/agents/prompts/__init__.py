"""Prompt 模板"""
from .medical_prompts import MEDICAL_PROMPTS, build_instruction
