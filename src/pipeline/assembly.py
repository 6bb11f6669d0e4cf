"""Explicit composition of the pipeline.

Every component is built once here and handed its collaborators, so tests
can swap any of them for a double.
"""

from src.core.config import Settings
from src.core.repository import ContentRepository
from src.llm import LLMProvider, get_provider
from src.pipeline.discovery import Discovery
from src.pipeline.generation import Generator
from src.pipeline.orchestrator import DailyAgent
from src.pipeline.rate_limiter import SlidingWindowRateLimiter
from src.pipeline.title_agent import TitleDraftAgent
from src.pipeline.verification import PdfExtractor, Verifier
from src.web.pdf import extract_text_from_pdf_bytes
from src.web.session import HttpSession


def build_rate_limiter(settings: Settings) -> SlidingWindowRateLimiter:
    return SlidingWindowRateLimiter(
        max_calls=settings.generation.max_calls_per_window,
        window_seconds=settings.generation.window_seconds,
    )


def assemble_agent(
    settings: Settings,
    repo: ContentRepository,
    session: HttpSession,
    *,
    provider: LLMProvider | None = None,
    limiter: SlidingWindowRateLimiter | None = None,
    pdf_extractor: PdfExtractor = extract_text_from_pdf_bytes,
) -> DailyAgent:
    """Build a DailyAgent with all of its stages."""
    provider = provider or get_provider(settings.generation.provider)
    limiter = limiter or build_rate_limiter(settings)

    discovery = Discovery(session, repo, settings.discovery)
    verifier = Verifier(
        session,
        settings.verification,
        settings.scores,
        settings.discovery.target_year,
        pdf_extractor=pdf_extractor,
    )
    generator = Generator(
        provider, limiter, settings.generation, settings.automation.agent_version,
    )
    return DailyAgent(settings, repo, discovery, verifier, generator)


def assemble_title_agent(
    settings: Settings,
    *,
    provider: LLMProvider | None = None,
    limiter: SlidingWindowRateLimiter | None = None,
) -> TitleDraftAgent:
    provider = provider or get_provider(settings.generation.provider)
    limiter = limiter or build_rate_limiter(settings)
    return TitleDraftAgent(
        provider, limiter, settings.generation, settings.automation.agent_version,
    )
