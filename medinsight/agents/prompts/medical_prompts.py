"""
影像解读 Prompt 模板
"""
from medinsight.schemas.analysis import Modality


_PROMPT_TEMPLATE = """As a medical AI expert, analyze this {scan_name} scan and provide a clear, patient-friendly interpretation. Focus on the following key points:

  1. **Findings:**
     - Describe any visible abnormalities or normal findings.
     - Summarize the general condition of the scanned area.
     - Indicate whether the findings appear normal or require further attention.

  2. **Patient Guidance:**
     - Highlight key points to discuss with the doctor.
     - Suggest relevant questions to ask about the findings.
     - Mention any lifestyle considerations based on the results.

  3. **Next Steps:**
     - Recommend appropriate follow-up actions.
     - Advise when to see the doctor next.
     - Note any immediate concerns that need addressing.

  4. **Important Notes:**
     - List warning signs to watch for.
     - Specify when to seek immediate medical care.
     - Provide general health recommendations.

  Use clear, simple language and maintain a professional yet empathetic tone. If applicable, include specific medical terminology to enhance accuracy."""

MEDICAL_PROMPTS = {
    Modality.MRI: _PROMPT_TEMPLATE.format(scan_name="MRI"),
    Modality.XRAY: _PROMPT_TEMPLATE.format(scan_name="X-ray"),
}


def build_instruction(modality: Modality) -> str:
    """按影像模态返回固定的解读指令"""
    return MEDICAL_PROMPTS[Modality(modality)]
