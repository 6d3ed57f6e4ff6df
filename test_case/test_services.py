#!/usr/bin/env python3
"""
MedInsight 核心服务测试用例
测试图像预处理、分类客户端、指令构建、解读 Agent、报告合成与配置
"""
import io

import numpy as np
import pytest
from PIL import Image
from langchain_core.messages import HumanMessage

from conftest import FakeChatModel, FakeInferenceClient, make_image_bytes
from medinsight.agents import NarrativeAgent
from medinsight.agents.prompts import MEDICAL_PROMPTS, build_instruction
from medinsight.core.config import Settings
from medinsight.core.exceptions import (
    ClassificationServiceError,
    ConfigurationError,
    ImageDecodeError,
    InputValidationError,
    NarrativeServiceError,
    PipelineStage
)
from medinsight.schemas import ClassificationResult, Modality, PreparedImage, Prediction
from medinsight.services.classification import ClassificationClient
from medinsight.services.imaging import ImagePreprocessor, stretch_contrast
from medinsight.services.report import DISCLAIMER, build_summary, compose_report


def _result(*scores):
    return ClassificationResult(
        model_id="test/model",
        predictions=[Prediction(label=f"l{i}", score=s) for i, s in enumerate(scores)]
    )


class TestImagePreprocessor:
    """测试图像预处理"""
    
    def test_large_image_resized_to_224(self):
        data = make_image_bytes(size=(4000, 3000), fmt="JPEG")
        prepared = ImagePreprocessor(size=224).prepare(data, "image/jpeg")
        
        with Image.open(io.BytesIO(prepared.data)) as img:
            assert img.size == (224, 224)
            assert img.format == "JPEG"
        assert (prepared.width, prepared.height) == (224, 224)
        assert prepared.content_type == "image/jpeg"
    
    @pytest.mark.parametrize("fmt,mode,size", [
        ("PNG", "RGBA", (10, 300)),
        ("PNG", "L", (512, 512)),
        ("BMP", "RGB", (33, 17)),
        ("GIF", "RGB", (300, 120)),
    ])
    def test_any_input_becomes_jpeg(self, fmt, mode, size):
        data = make_image_bytes(size=size, fmt=fmt, mode=mode)
        prepared = ImagePreprocessor(size=224).prepare(data, f"image/{fmt.lower()}")
        
        with Image.open(io.BytesIO(prepared.data)) as img:
            assert img.format == "JPEG"
            assert img.mode == "RGB"
            assert img.size == (224, 224)
    
    def test_corrupt_bytes_raise_decode_error(self):
        with pytest.raises(ImageDecodeError) as exc_info:
            ImagePreprocessor().prepare(b"definitely not an image", "image/png")
        assert exc_info.value.stage == PipelineStage.PREPROCESS
    
    def test_empty_bytes_raise_decode_error(self):
        with pytest.raises(ImageDecodeError):
            ImagePreprocessor().prepare(b"", "image/png")
    
    def test_non_image_mime_rejected(self, png_bytes):
        with pytest.raises(InputValidationError):
            ImagePreprocessor().prepare(png_bytes, "application/pdf")
    
    @pytest.mark.parametrize("fmt,dtype", [("PNG", np.uint16), ("TIFF", np.float32)])
    def test_high_bit_depth_keeps_dynamic_range(self, fmt, dtype):
        gradient = np.tile(np.linspace(0, 4000, 300).astype(dtype), (50, 1))
        buffer = io.BytesIO()
        Image.fromarray(gradient).save(buffer, format=fmt)
        
        prepared = ImagePreprocessor(size=224, normalize=False).prepare(buffer.getvalue(), f"image/{fmt.lower()}")
        with Image.open(io.BytesIO(prepared.data)) as img:
            row = np.asarray(img.convert("L"))[112]
        
        assert len(np.unique(row)) > 100
        assert (row >= 250).mean() < 0.1
        assert row[:10].mean() < row[-10:].mean()
    
    def test_decompression_bomb_is_decode_error(self, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        data = make_image_bytes(size=(100, 100), mode="L")
        
        with pytest.raises(ImageDecodeError) as exc_info:
            ImagePreprocessor().prepare(data, "image/png")
        assert exc_info.value.status_code == 400
    
    def test_oversized_pixel_count_warning_is_decode_error(self, monkeypatch):
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        data = make_image_bytes(size=(40, 40), mode="L")
        
        with pytest.raises(ImageDecodeError):
            ImagePreprocessor().prepare(data, "image/png")
    
    def test_normalize_disabled_keeps_uniform_color(self):
        data = Image.new("RGB", (50, 50), (100, 100, 100))
        buffer = io.BytesIO()
        data.save(buffer, format="PNG")
        
        prepared = ImagePreprocessor(size=32, normalize=False).prepare(buffer.getvalue(), "image/png")
        with Image.open(io.BytesIO(prepared.data)) as img:
            pixel = img.getpixel((16, 16))
        assert all(abs(c - 100) <= 3 for c in pixel)


class TestStretchContrast:
    """测试对比度拉伸"""
    
    def test_stretches_to_full_range(self):
        image = np.tile(np.linspace(100, 150, 100, dtype=np.float32), (100, 1))
        image = np.stack([image] * 3, axis=-1).astype(np.uint8)
        
        stretched = stretch_contrast(image)
        assert stretched.dtype == np.uint8
        assert stretched.min() == 0
        assert stretched.max() == 255
    
    def test_uniform_image_unchanged(self):
        image = np.full((10, 10, 3), 77, dtype=np.uint8)
        assert np.array_equal(stretch_contrast(image), image)


class TestClassificationResult:
    """测试分类结果模型"""
    
    def test_sorted_descending(self):
        result = _result(0.2, 0.9, 0.5)
        assert [p.score for p in result.predictions] == [0.9, 0.5, 0.2]
    
    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            ClassificationResult(model_id="m", predictions=[])
    
    def test_score_out_of_range_rejected(self):
        with pytest.raises(ValueError):
            Prediction(label="x", score=1.5)
    
    def test_average_confidence_top_three(self):
        result = _result(0.1, 0.9, 0.8, 0.7)
        assert result.average_confidence(3) == pytest.approx(80.0)


class TestClassificationClient:
    """测试分类客户端"""
    
    def _prepared(self):
        return PreparedImage(data=b"jpeg-bytes", width=224, height=224)
    
    def test_returns_sorted_result(self):
        client = ClassificationClient(client=FakeInferenceClient(scores=(0.2, 0.9, 0.5)))
        result = client.classify(self._prepared(), Modality.MRI)
        
        assert [p.score for p in result.predictions] == [0.9, 0.5, 0.2]
        assert result.predictions[0].label == "label_1"
    
    def test_model_selected_by_modality(self):
        config = Settings(MRI_CLASSIFIER_MODEL="org/mri-model", XRAY_CLASSIFIER_MODEL="org/xray-model")
        fake = FakeInferenceClient()
        client = ClassificationClient(client=fake, config=config)
        
        client.classify(self._prepared(), Modality.MRI)
        client.classify(self._prepared(), Modality.XRAY)
        
        assert [c["model"] for c in fake.calls] == ["org/mri-model", "org/xray-model"]
        assert fake.calls[0]["image"] == b"jpeg-bytes"
    
    def test_remote_error_wrapped(self):
        fake = FakeInferenceClient(error=RuntimeError("model is overloaded"))
        client = ClassificationClient(client=fake)
        
        with pytest.raises(ClassificationServiceError) as exc_info:
            client.classify(self._prepared(), Modality.XRAY)
        
        assert "model is overloaded" in exc_info.value.message
        assert exc_info.value.status_code == 502
        assert exc_info.value.stage == PipelineStage.CLASSIFY
        assert len(fake.calls) == 1
    
    def test_empty_predictions_is_service_error(self):
        client = ClassificationClient(client=FakeInferenceClient(scores=()))
        with pytest.raises(ClassificationServiceError):
            client.classify(self._prepared(), Modality.MRI)


class TestPrompts:
    """测试指令构建"""
    
    def test_pure_mapping(self):
        assert build_instruction(Modality.MRI) == build_instruction(Modality.MRI)
        assert build_instruction("mri") == build_instruction(Modality.MRI)
    
    def test_templates_per_modality(self):
        assert set(MEDICAL_PROMPTS) == {Modality.MRI, Modality.XRAY}
        assert "MRI scan" in build_instruction(Modality.MRI)
        assert "X-ray scan" in build_instruction(Modality.XRAY)
    
    @pytest.mark.parametrize("section", ["Findings", "Patient Guidance", "Next Steps", "warning signs"])
    def test_required_sections(self, section):
        for modality in Modality:
            assert section in build_instruction(modality)
    
    def test_unknown_modality_rejected(self):
        with pytest.raises(ValueError):
            build_instruction("ct")


class TestNarrativeAgent:
    """测试解读 Agent"""
    
    def test_single_user_message(self):
        llm = FakeChatModel(content="Everything looks fine.")
        text = NarrativeAgent(llm).narrate("instruction text")
        
        assert text == "Everything looks fine."
        assert len(llm.calls) == 1
        messages = llm.calls[0]
        assert len(messages) == 1
        assert isinstance(messages[0], HumanMessage)
        assert messages[0].content == "instruction text"
    
    def test_missing_content_is_empty_string(self):
        assert NarrativeAgent(FakeChatModel(content=None)).narrate("x") == ""
    
    def test_remote_error_wrapped(self):
        agent = NarrativeAgent(FakeChatModel(error=RuntimeError("rate limited")))
        with pytest.raises(NarrativeServiceError) as exc_info:
            agent.narrate("x")
        assert exc_info.value.message == "Groq API error: rate limited"
        assert exc_info.value.stage == PipelineStage.NARRATE


class TestReportComposer:
    """测试报告合成"""
    
    def test_average_confidence_line(self):
        summary = build_summary(_result(0.90, 0.80, 0.70), Modality.MRI)
        assert "Image Quality Assessment: 80.00% confidence in image clarity" in summary
        assert summary.startswith("Initial Analysis of MRI Image:")
    
    def test_fewer_than_three_predictions(self):
        summary = build_summary(_result(0.5), Modality.XRAY)
        assert "50.00%" in summary
        assert "XRAY" in summary
    
    def test_fixed_order_and_disclaimer(self):
        report = compose_report(_result(0.9, 0.8, 0.7), "NARRATIVE BODY", Modality.XRAY)
        text = report.text
        
        assert text.endswith(DISCLAIMER)
        assert text.index("Initial Analysis") < text.index("NARRATIVE BODY") < text.index(DISCLAIMER)
    
    def test_section_spacing(self):
        text = compose_report(_result(0.9), "BODY", Modality.MRI).text
        assert "A detailed analysis follows below.\n\n\nPatient-Friendly Analysis:\nBODY\n\nImportant Note: " in text
    
    def test_report_is_immutable(self):
        report = compose_report(_result(0.9), "n", Modality.MRI)
        with pytest.raises(ValueError):
            report.narrative = "changed"
    
    def test_empty_narrative_still_has_disclaimer(self):
        report = compose_report(_result(0.9), "", Modality.MRI)
        assert report.narrative == ""
        assert report.text.endswith(DISCLAIMER)


class TestSettings:
    """测试配置"""
    
    def test_missing_credentials(self):
        config = Settings(HUGGINGFACE_API_KEY=None, GROQ_API_KEY="gsk")
        with pytest.raises(ConfigurationError) as exc_info:
            config.require_credentials()
        assert "HUGGINGFACE_API_KEY" in exc_info.value.message
        assert "GROQ_API_KEY" not in exc_info.value.message
    
    def test_credentials_present(self):
        Settings(HUGGINGFACE_API_KEY="hf", GROQ_API_KEY="gsk").require_credentials()
    
    def test_classifier_model_lookup(self):
        config = Settings(MRI_CLASSIFIER_MODEL="a/mri", XRAY_CLASSIFIER_MODEL="b/xray")
        assert config.classifier_model(Modality.MRI) == "a/mri"
        assert config.classifier_model("xray") == "b/xray"
    
    def test_setup_logging_without_file_sink(self):
        from medinsight.core.logging import setup_logging
        
        setup_logging(Settings(LOG_TO_FILE=False, LOG_LEVEL="WARNING"))
        setup_logging()
