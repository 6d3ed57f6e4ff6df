"""
解读 Agent - 调用对话模型生成面向患者的解读文本
"""
from langchain_openai import ChatOpenAI
from langchain_core.messages import HumanMessage

from medinsight.core.config import settings, Settings
from medinsight.core.logging import logger
from medinsight.core.exceptions import NarrativeServiceError


def create_chat_llm(config: Settings = None) -> ChatOpenAI:
    """按配置创建 Groq (OpenAI 兼容) 对话模型"""
    config = config or settings
    return ChatOpenAI(
        model=config.LLM_MODEL,
        base_url=config.LLM_BASE_URL,
        api_key=config.GROQ_API_KEY,
        temperature=config.LLM_TEMPERATURE,
        max_tokens=config.LLM_MAX_TOKENS,
        max_retries=0
    )


class NarrativeAgent:
    """面向患者的解读 Agent"""
    
    def __init__(self, llm: ChatOpenAI = None):
        """
        初始化解读 Agent
        
        Args:
            llm: LLM 实例 (可选)
        """
        self.llm = llm if llm is not None else create_chat_llm()
    
    def narrate(self, instruction: str) -> str:
        """
        发送单条用户消息并返回生成文本
        
        Args:
            instruction: 解读指令
            
        Returns:
            生成的文本，无内容时返回空字符串
        """
        logger.info(f"发送解读请求: {instruction[:100]}...")
        
        messages = [HumanMessage(content=instruction)]
        
        try:
            response = self.llm.invoke(messages)
        except Exception as e:
            logger.error(f"Groq API 调用失败: {e}")
            raise NarrativeServiceError(f"Groq API error: {e}") from e
        
        content = getattr(response, "content", None)
        if not isinstance(content, str):
            content = ""
        
        logger.info(f"解读文本已生成: {len(content)} 字符")
        return content
