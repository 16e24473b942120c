"""
Best-effort side effects that run after a database commit.

Each effect is isolated: it runs concurrently with the others under its own
timeout, and an exception, a timeout or a failed ChannelResult is recorded as
a failure without affecting the other effects or the caller.
"""
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

EffectFactory = Callable[[], Awaitable[Any]]


@dataclass
class EffectOutcome:
    name: str
    ok: bool
    result: Any = None
    error: Optional[str] = None


@dataclass
class EffectReport:
    outcomes: List[EffectOutcome] = field(default_factory=list)

    @property
    def succeeded(self) -> List[str]:
        return [o.name for o in self.outcomes if o.ok]

    @property
    def failed(self) -> List[str]:
        return [o.name for o in self.outcomes if not o.ok]

    def get(self, name: str) -> Optional[EffectOutcome]:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None

    def any_ok(self, prefix: str) -> bool:
        return any(o.ok for o in self.outcomes if o.name.startswith(prefix))

    def to_dict(self) -> dict:
        return {
            o.name: {"ok": o.ok, "error": o.error} for o in self.outcomes
        }


class PostCommitEffects:
    """Collects named coroutine factories and runs them after commit"""

    def __init__(self, timeout: float):
        self.timeout = timeout
        self._effects: List[Tuple[str, EffectFactory]] = []

    def add(self, name: str, factory: EffectFactory) -> None:
        self._effects.append((name, factory))

    def add_all(self, factories: Dict[str, EffectFactory]) -> None:
        for name, factory in factories.items():
            self.add(name, factory)

    def __len__(self) -> int:
        return len(self._effects)

    async def _run_one(self, name: str, factory: EffectFactory) -> EffectOutcome:
        try:
            result = await asyncio.wait_for(factory(), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.warning(f"Post-commit effect '{name}' timed out after {self.timeout}s")
            return EffectOutcome(name=name, ok=False, error="timeout")
        except Exception as e:
            logger.exception(f"Post-commit effect '{name}' failed: {e}")
            return EffectOutcome(name=name, ok=False, error=str(e))

        # Channel results report failure without raising
        if getattr(result, "success", True) is False:
            error = getattr(result, "error", None) or "failed"
            logger.warning(f"Post-commit effect '{name}' reported failure: {error}")
            return EffectOutcome(name=name, ok=False, result=result, error=error)

        return EffectOutcome(name=name, ok=True, result=result)

    async def run(self) -> EffectReport:
        if not self._effects:
            return EffectReport()
        outcomes = await asyncio.gather(
            *(self._run_one(name, factory) for name, factory in self._effects)
        )
        report = EffectReport(outcomes=list(outcomes))
        logger.info(
            f"Post-commit effects: {len(report.succeeded)} ok, {len(report.failed)} failed"
            + (f" ({', '.join(report.failed)})" if report.failed else "")
        )
        return report
