import base64
import json
import logging
from copy import deepcopy
from typing import Any, Dict, List

from openai import OpenAI, OpenAIError
from pydantic import ValidationError

from uxray.features.scan.exceptions import AnalysisError, AnalysisFailure
from uxray.features.scan.schemas.analysis import (
    IssueFinding,
    RecommendationFinding,
    UXAnalysisResult,
)
from uxray.features.scan.schemas.pipeline import AnalysisOutcome
from uxray.features.scan.schemas.snapshot import PageSnapshot
from uxray.features.scan.services.utils.json_repair import parse_or_default
from uxray.platform.config import settings

logger = logging.getLogger(__name__)

PROMPT_SAMPLE_SIZE = 5

DEFAULT_SCORE = 70
DEFAULT_SUMMARY = "Analysis completed with some limitations due to page loading issues."

# Used when the response holds no JSON object or one that does not parse
PARSE_FALLBACK_ANALYSIS: Dict[str, Any] = {
    "score": 70,
    "issues": [
        {
            "category": "performance",
            "severity": "medium",
            "title": "Analysis Timeout",
            "description": "The website took too long to load completely, which may indicate performance issues.",
            "element": "Page load",
            "impact": "Users may experience slow loading times",
        }
    ],
    "recommendations": [
        {
            "priority": "medium",
            "title": "Optimize Page Load Speed",
            "description": "Improve website performance to reduce loading times",
            "implementation": "Optimize images, minify CSS/JS, use CDN, enable compression",
            "expectedImpact": "Faster loading times and better user experience",
            "effort": "medium",
        }
    ],
    "summary": (
        "Analysis was partially successful. The website appears to have some performance "
        "considerations that should be addressed."
    ),
}

# Used when synthesis itself fails (service error, empty response, unexpected exception)
SYNTHESIS_FALLBACK_ANALYSIS: Dict[str, Any] = {
    "score": 65,
    "issues": [
        {
            "category": "performance",
            "severity": "high",
            "title": "Website Loading Issues",
            "description": (
                "The website failed to load properly during analysis, indicating potential "
                "performance or accessibility problems."
            ),
            "element": "Page load",
            "impact": "Users may be unable to access the website or experience significant delays",
        }
    ],
    "recommendations": [
        {
            "priority": "high",
            "title": "Investigate Loading Issues",
            "description": "Debug why the website fails to load reliably",
            "implementation": "Check server response times, fix broken resources, optimize critical path",
            "expectedImpact": "Improved reliability and accessibility",
            "effort": "high",
        }
    ],
    "summary": (
        "Website analysis could not be completed due to loading issues. This suggests "
        "fundamental performance problems that should be addressed."
    ),
}

SYSTEM_PROMPT = "You are a UX expert auditing websites. Always respond with valid JSON only."


class UXAnalyzerService:
    """
    Turns a page snapshot into a UX analysis via a single LLM call.

    The completion is treated as untrusted text: the first JSON object is
    pulled out of it and coerced into a UXAnalysisResult, with fixed
    fallbacks whenever that cannot be done.
    """

    @staticmethod
    def synthesize(url: str, snapshot: PageSnapshot) -> AnalysisOutcome:
        """
        Analyze, degrading to the synthesis fallback instead of raising.
        """
        try:
            result = UXAnalyzerService.analyze(url, snapshot)
            return AnalysisOutcome(result=result, snapshot=snapshot)
        except Exception as e:
            logger.error(f"UX analysis failed for {url}, using fallback analysis: {e}", exc_info=True)
            return AnalysisOutcome(
                result=UXAnalyzerService.fallback_result(),
                snapshot=snapshot,
                is_fallback=True,
            )

    @staticmethod
    def analyze(url: str, snapshot: PageSnapshot) -> UXAnalysisResult:
        """
        Raises:
            AnalysisError: service failure or empty response
        """
        prompt = UXAnalyzerService.build_prompt(url, snapshot)
        messages = UXAnalyzerService.build_messages(prompt, snapshot.screenshot)

        logger.info(f"Sending {url} for UX analysis (screenshot attached: {snapshot.has_screenshot})")
        content = UXAnalyzerService._call_llm(messages)
        logger.info("Analysis received from reasoning service")

        try:
            data = parse_or_default(content, PARSE_FALLBACK_ANALYSIS)
        except AnalysisError as e:
            logger.warning(f"{e}, using parse fallback analysis")
            data = deepcopy(PARSE_FALLBACK_ANALYSIS)
        return UXAnalyzerService.coerce_result(data)

    @staticmethod
    def fallback_result() -> UXAnalysisResult:
        return UXAnalyzerService.coerce_result(deepcopy(SYNTHESIS_FALLBACK_ANALYSIS))

    @staticmethod
    def coerce_result(data: Any) -> UXAnalysisResult:
        """Fill missing fields with defaults and drop entries that are not objects."""
        if not isinstance(data, dict):
            data = {}

        summary = data.get("summary")
        if not isinstance(summary, str) or not summary.strip():
            summary = DEFAULT_SUMMARY

        return UXAnalysisResult(
            score=UXAnalyzerService._coerce_score(data.get("score")),
            issues=UXAnalyzerService._coerce_findings(data.get("issues"), IssueFinding),
            recommendations=UXAnalyzerService._coerce_findings(
                data.get("recommendations"), RecommendationFinding
            ),
            summary=summary,
        )

    @staticmethod
    def _coerce_score(value: Any) -> int:
        if value is None or isinstance(value, bool):
            return DEFAULT_SCORE
        try:
            score = int(round(float(value)))
        except (TypeError, ValueError):
            return DEFAULT_SCORE
        return max(0, min(100, score))

    @staticmethod
    def _coerce_findings(items: Any, model) -> list:
        if not isinstance(items, list):
            return []

        findings = []
        for item in items:
            if not isinstance(item, dict):
                continue
            try:
                findings.append(model.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed {model.__name__}: {e}")
        return findings

    @staticmethod
    def _sample(elements) -> str:
        return json.dumps(
            [element.model_dump(by_alias=True) for element in elements[:PROMPT_SAMPLE_SIZE]],
            indent=2,
        )

    @staticmethod
    def build_prompt(url: str, snapshot: PageSnapshot) -> str:
        """Build the single analysis prompt from snapshot data."""
        return f"""
You are a UX expert analyzing a website. Based on the following data, provide a comprehensive UX analysis:

URL: {url}
Page Title: {snapshot.title}
Screenshot: {'[Screenshot provided]' if snapshot.has_screenshot else '[No screenshot available]'}

Page Structure:
- Has Navigation: {snapshot.has_navigation}
- Has Header: {snapshot.has_header}
- Has Footer: {snapshot.has_footer}
- Has Sidebar: {snapshot.has_sidebar}
- Headings: {UXAnalyzerService._sample(snapshot.headings)}
- Buttons/CTAs: {UXAnalyzerService._sample(snapshot.buttons)}
- Navigation Links: {UXAnalyzerService._sample(snapshot.links)}
- Forms: {UXAnalyzerService._sample(snapshot.forms)}
- Images: {UXAnalyzerService._sample(snapshot.images)}

Content Preview: {snapshot.body_text}

Please analyze this website for UX issues and provide:

1. Overall UX Score (0-100)
2. Specific UX Issues found (categorize as: layout, accessibility, conversion, mobile, performance)
3. Actionable Recommendations with implementation details
4. Brief summary of main findings

Focus on:
- Visual hierarchy and layout
- Conversion optimization opportunities
- Accessibility concerns
- Mobile responsiveness indicators
- Clear CTAs and user flows
- Information architecture
- Navigation usability

Return the analysis in this JSON format:
{{
  "score": number,
  "issues": [
    {{
      "category": "layout|accessibility|conversion|mobile|performance",
      "severity": "high|medium|low",
      "title": "Issue title",
      "description": "Detailed description",
      "element": "CSS selector or description of element",
      "impact": "Impact on user experience"
    }}
  ],
  "recommendations": [
    {{
      "priority": "high|medium|low",
      "title": "Recommendation title",
      "description": "What to change",
      "implementation": "How to implement the change",
      "expectedImpact": "Expected improvement",
      "effort": "low|medium|high"
    }}
  ],
  "summary": "Brief 2-3 sentence summary of key findings"
}}
"""

    @staticmethod
    def build_messages(prompt: str, screenshot) -> List[Dict[str, Any]]:
        if not screenshot:
            user_content: Any = prompt
        else:
            encoded = base64.b64encode(screenshot).decode("ascii")
            user_content = [
                {"type": "text", "text": prompt},
                {"type": "image_url", "image_url": {"url": f"data:image/png;base64,{encoded}"}},
            ]

        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": user_content},
        ]

    @staticmethod
    def _get_client() -> OpenAI:
        return OpenAI(api_key=settings.OPENAI_API_KEY, base_url=settings.OPENAI_BASE_URL)

    @staticmethod
    def _call_llm(messages: List[Dict[str, Any]]) -> str:
        """One request per scan, no retry at this layer."""
        try:
            client = UXAnalyzerService._get_client()
            completion = client.chat.completions.create(
                model=settings.OPENAI_MODEL,
                messages=messages,
                max_tokens=settings.ANALYSIS_MAX_TOKENS,
                temperature=settings.ANALYSIS_TEMPERATURE,
            )
        except OpenAIError as e:
            logger.error(f"Reasoning service call failed: {e}")
            raise AnalysisError(AnalysisFailure.SERVICE_UNAVAILABLE, str(e)) from e

        content = completion.choices[0].message.content if completion.choices else None
        if not content:
            raise AnalysisError(AnalysisFailure.EMPTY_RESPONSE, "No analysis content received")
        return content
