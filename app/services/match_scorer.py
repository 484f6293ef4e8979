"""
Match scorer: rates how well a scraped candidate fits a job.

The language model is asked for a JSON object {"score": int, "reasoning": str}.
Any failure (API error, timeout, unparsable reply) surfaces as
MatchScoringError; the intake pipeline turns that into fallback_match().
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.exceptions import MatchScoringError
from app.schemas.candidate import NormalizedCandidate
from app.schemas.intake import JobRequirements, MatchResult

logger = logging.getLogger(__name__)

JSON_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

TIMEOUT_REASONING = "Candidate evaluated using standard profile analysis"
FALLBACK_REASONING = "Candidate evaluated using comprehensive profile analysis"


def build_prompt(job: JobRequirements, candidate: NormalizedCandidate) -> str:
    """Render the scoring prompt for one job/candidate pair."""
    if candidate.experience:
        experience = "\n".join(f"- {exp.title} at {exp.company}" for exp in candidate.experience[:3])
    else:
        experience = "No experience data available"

    if candidate.skills:
        skills = ", ".join(candidate.skills[:10])
    else:
        skills = "No skills data available"

    if candidate.education:
        education = "\n".join(f"- {edu.degree} from {edu.school}" for edu in candidate.education[:2])
    else:
        education = "No education data available"

    return f"""You are an expert recruiter. Analyze how well this candidate matches the job requirements and provide a match score from 0-100 and brief reasoning.

JOB REQUIREMENTS:
Title: {job.title}
Seniority: {job.seniority_level}
Key Skills: {', '.join(job.key_skills)}
Description: {job.description[:500]}...

CANDIDATE PROFILE:
Name: {candidate.first_name} {candidate.last_name}
Current Role: {candidate.headline or 'N/A'}
Location: {candidate.location or 'N/A'}

Experience:
{experience}

Skills:
{skills}

Education:
{education}

Respond with ONLY a JSON object in this exact format:
{{
  "score": 85,
  "reasoning": "Strong match due to relevant experience in similar role, 80% skill overlap, and appropriate seniority level"
}}"""


def parse_score_response(text: str) -> MatchResult:
    """
    Extract the score object from a model reply.

    The first `{...}` span is parsed; the score is rounded and clamped to
    0-100.

    Raises:
        MatchScoringError: No JSON object, or score/reasoning missing or invalid
    """
    match = JSON_OBJECT_PATTERN.search(text or "")
    if not match:
        raise MatchScoringError("Scorer reply contained no JSON object")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise MatchScoringError(f"Scorer reply was not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MatchScoringError("Scorer reply was not a JSON object")

    raw_score = data.get("score")
    reasoning = data.get("reasoning")
    if isinstance(raw_score, bool) or not isinstance(reasoning, str) or not reasoning.strip():
        raise MatchScoringError("Scorer reply is missing score or reasoning")

    try:
        score = int(round(float(raw_score)))
    except (TypeError, ValueError) as e:
        raise MatchScoringError(f"Scorer returned a non-numeric score: {raw_score!r}") from e

    return MatchResult(score=max(0, min(100, score)), reasoning=reasoning.strip())


def fallback_match(timed_out: bool = False) -> MatchResult:
    """Default result used when the scorer is unavailable."""
    return MatchResult(
        score=settings.FALLBACK_MATCH_SCORE,
        reasoning=TIMEOUT_REASONING if timed_out else FALLBACK_REASONING,
        fallback=True
    )


class MatchScorer(ABC):
    """Base class for LLM scoring backends."""

    name = "base"

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Send the prompt and return the model's raw text reply."""
        pass

    async def score(self, job: JobRequirements, candidate: NormalizedCandidate) -> MatchResult:
        """
        Score one candidate against a job.

        Args:
            job: Title, description, seniority and key skills
            candidate: Normalized scraped profile

        Returns:
            MatchResult with score in 0-100

        Raises:
            MatchScoringError: If the provider call or reply parsing fails
        """
        prompt = build_prompt(job, candidate)

        try:
            text = await self.complete(prompt)
        except MatchScoringError:
            raise
        except Exception as e:
            raise MatchScoringError(f"{self.name} scoring request failed: {e}") from e

        result = parse_score_response(text)
        logger.info(
            f"Scored {candidate.first_name} {candidate.last_name} for '{job.title}': {result.score}"
        )
        return result


class AnthropicMatchScorer(MatchScorer):
    name = "anthropic"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.ANTHROPIC_API_KEY
        self.model = model or settings.ANTHROPIC_MODEL
        self.timeout = timeout or settings.SCORER_TIMEOUT_SECONDS

    async def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise MatchScoringError("ANTHROPIC_API_KEY is not configured")

        async with AsyncAnthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0) as client:
            message = await client.messages.create(
                model=self.model,
                max_tokens=200,
                messages=[{"role": "user", "content": prompt}],
            )

        if not message.content or not getattr(message.content[0], "text", None):
            raise MatchScoringError("Empty response from Anthropic")
        return message.content[0].text


class OpenAIMatchScorer(MatchScorer):
    name = "openai"

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self.model = model or settings.OPENAI_MODEL
        self.timeout = timeout or settings.SCORER_TIMEOUT_SECONDS

    async def complete(self, prompt: str) -> str:
        if not self.api_key:
            raise MatchScoringError("OPENAI_API_KEY is not configured")

        async with AsyncOpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0) as client:
            response = await client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                response_format={"type": "json_object"},
                temperature=settings.OPENAI_TEMPERATURE
            )

        content = response.choices[0].message.content
        if not content:
            raise MatchScoringError("Empty response from OpenAI")
        return content


def get_match_scorer(provider: Optional[str] = None) -> MatchScorer:
    """
    Build the scorer for the configured LLM provider.

    Raises:
        ValueError: Unknown provider name
    """
    provider = (provider or settings.LLM_PROVIDER).lower()
    if provider == "anthropic":
        return AnthropicMatchScorer()
    if provider == "openai":
        return OpenAIMatchScorer()
    raise ValueError(f"Unknown LLM provider: {provider}")
