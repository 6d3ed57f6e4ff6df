"""
MedInsight 测试公共夹具
所有远程服务均以桩对象替代，测试不访问网络
"""
import io
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest
from PIL import Image

# 添加项目路径
sys.path.insert(0, str(Path(__file__).parent.parent))

from medinsight.agents import AnalysisOrchestrator, NarrativeAgent
from medinsight.services.classification import ClassificationClient


def make_image_bytes(size=(64, 48), fmt="PNG", mode="RGB", color=(120, 80, 40)) -> bytes:
    """生成测试图像字节"""
    if mode == "L":
        color = color[0]
    elif mode == "RGBA":
        color = tuple(color) + (128,)
    image = Image.new(mode, size, color)
    # 加一块亮区，避免图像完全均匀
    image.paste(255 if mode == "L" else (255,) * len(image.getbands()), (0, 0, size[0] // 4, size[1] // 4))
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


class FakeInferenceClient:
    """模拟 huggingface_hub.InferenceClient"""
    
    def __init__(self, scores=(0.2, 0.9, 0.5), error=None):
        self.scores = scores
        self.error = error
        self.calls = []
    
    def image_classification(self, image, model=None):
        self.calls.append({"image": image, "model": model})
        if self.error is not None:
            raise self.error
        return [
            SimpleNamespace(label=f"label_{i}", score=score)
            for i, score in enumerate(self.scores)
        ]


class FakeChatModel:
    """模拟 ChatOpenAI，记录调用次数"""
    
    def __init__(self, content="Your scan looks normal.", error=None):
        self.content = content
        self.error = error
        self.calls = []
    
    def invoke(self, messages):
        self.calls.append(messages)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(content=self.content)


@pytest.fixture
def png_bytes():
    return make_image_bytes()


@pytest.fixture
def fake_hf():
    return FakeInferenceClient()


@pytest.fixture
def fake_llm():
    return FakeChatModel()


@pytest.fixture
def build_orchestrator():
    """按给定桩对象构建调度器"""
    def _build(hf=None, llm=None):
        hf = hf or FakeInferenceClient()
        llm = llm or FakeChatModel()
        orchestrator = AnalysisOrchestrator(
            classifier=ClassificationClient(client=hf),
            narrator=NarrativeAgent(llm)
        )
        return orchestrator, hf, llm
    return _build
