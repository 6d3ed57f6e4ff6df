"""
报告合成服务
"""
from medinsight.schemas.analysis import AnalysisReport, ClassificationResult, Modality


DISCLAIMER = (
    "This analysis is provided for informational purposes only. "
    "It is not a substitute for professional medical advice, diagnosis, or treatment. "
    "Always seek the advice of your physician or other qualified health provider "
    "with any questions you may have regarding a medical condition."
)

SUMMARY_TEMPLATE = """Initial Analysis of {modality} Image:

Key Findings:
Image Quality Assessment: {confidence:.2f}% confidence in image clarity
Note: This is a preliminary assessment. A detailed analysis follows below."""


def build_summary(classification: ClassificationResult, modality: Modality) -> str:
    """基于前 3 个预测的平均置信度生成初步评估"""
    return SUMMARY_TEMPLATE.format(
        modality=Modality(modality).label,
        confidence=classification.average_confidence(3)
    )


def compose_report(
    classification: ClassificationResult,
    narrative: str,
    modality: Modality
) -> AnalysisReport:
    """
    合成最终报告: 初步评估 + 解读文本 + 免责声明
    
    Args:
        classification: 分类结果
        narrative: LLM 解读文本
        modality: 影像模态
        
    Returns:
        AnalysisReport
    """
    return AnalysisReport(
        modality=modality,
        summary=build_summary(classification, modality),
        narrative=narrative or "",
        disclaimer=DISCLAIMER
    )
