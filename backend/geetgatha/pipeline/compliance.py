"""Compliance stage ("Niti Rakshak"): plagiarism and originality check.

The report only annotates the output. If the check itself fails, the run
continues with a maximal score and an "Error Checking" verdict.
"""

from geetgatha.pipeline.base import fails_open
from geetgatha.schemas.analysis import UNCHECKED_COMPLIANCE, ComplianceReport
from geetgatha.services.llm import LLMAdapter

COMPLIANCE_SYSTEM_PROMPT = """You are the "Niti Rakshak" (Copyright Guardian).
Your task is to scan generated lyrics for Plagiarism and Originality.
1. **Corpus Check:** Compare the input against your knowledge of Indian Cinema lyrics (Hindi, Telugu, Tamil, etc.).
2. **Cliche Detection:** Flag overused phrases (e.g., "Love is like a rose").
3. **Similarity Scoring:** Estimate an originality score (0-100). High = unique, low = too similar to famous songs.
4. **Report:** List any phrases that might be potential copyright risks.
Output structured JSON data.
"""


def _unchecked_report(adapter, draft: str) -> ComplianceReport:
    return UNCHECKED_COMPLIANCE.model_copy(deep=True)


@fails_open(_unchecked_report)
async def run_compliance_stage(adapter: LLMAdapter, draft: str) -> ComplianceReport:
    return await adapter.generate_text(
        f"Analyze these lyrics for plagiarism risks: \n{draft}",
        ComplianceReport,
        temperature=0.2,
        system_prompt=COMPLIANCE_SYSTEM_PROMPT,
    )
