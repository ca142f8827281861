from typing import Callable, Optional, Sequence, TextIO

from get_vsix.config import DEFAULT_LIMIT
from get_vsix.errors import InvalidSelectionError, NotFoundError
from get_vsix.marketplace import CandidateExtension
from get_vsix.utils.logger import setup_logger

logger = setup_logger(name=__name__)

# Receives the truncated candidate list, returns a zero-based index into it.
Chooser = Callable[[Sequence[CandidateExtension]], int]


def format_candidate(index: int, candidate: CandidateExtension) -> str:
    return (
        f"[{index + 1}] : {candidate.display_name} by {candidate.publisher} "
        f"v{candidate.version}"
    )


def describe(candidate: CandidateExtension) -> str:
    lines = [f"{candidate.display_name} ({candidate.identifier}):"]
    if candidate.short_description:
        lines.append(candidate.short_description)
    lines.append("")
    lines.append(f"\tPublisher: {candidate.publisher}")
    lines.append(f"\tVersion: {candidate.version}")
    if candidate.target_platform:
        lines.append(f"\tPlatform: {candidate.target_platform}")
    if candidate.last_updated:
        lines.append(f"\tLast updated: {candidate.last_updated}")
    return "\n".join(lines)


def prompt_chooser(
    stdin: Optional[TextIO] = None, stdout: Optional[TextIO] = None
) -> Chooser:
    """
    Build the interactive chooser used by the CLI.

    The list is numbered from 1 for the user; the returned index is zero-based.
    """

    def choose(candidates: Sequence[CandidateExtension]) -> int:
        out = stdout
        print(f"Found {len(candidates)} extensions", file=out)
        print(file=out)
        for i, candidate in enumerate(candidates):
            print(format_candidate(i, candidate), file=out)
        print(file=out)
        print(
            "Input the index of the extension you want to download: ",
            end="",
            flush=True,
            file=out,
        )

        if stdin is None:
            try:
                answer = input()
            except EOFError as e:
                raise InvalidSelectionError("No selection was entered") from e
        else:
            answer = stdin.readline()
            if not answer:
                raise InvalidSelectionError("No selection was entered")

        try:
            return int(answer.strip()) - 1
        except ValueError as e:
            raise InvalidSelectionError(
                f"{answer.strip()!r} is not a number"
            ) from e

    return choose


def select(
    candidates: Sequence[CandidateExtension],
    limit: Optional[int] = None,
    chooser: Optional[Chooser] = None,
) -> CandidateExtension:
    """
    Resolve exactly one candidate.

    Args:
        candidates: Search results in marketplace order.
        limit: Keep at most this many results (``DEFAULT_LIMIT`` when unset).
        chooser: Called only when more than one candidate remains.

    Returns:
        The selected candidate, always one of the first ``limit`` entries.
    """
    if limit is None:
        limit = DEFAULT_LIMIT
    shown = list(candidates)[: max(limit, 0)]

    if not shown:
        logger.debug("No extension matched the search")
        raise NotFoundError("Couldn't find any matching extension")
    if len(shown) == 1:
        logger.info("Found 1 extension: %s", shown[0].identifier)
        return shown[0]

    if chooser is None:
        chooser = prompt_chooser()
    index = chooser(shown)
    if isinstance(index, bool) or not isinstance(index, int):
        raise InvalidSelectionError(f"The selection {index!r} is not an index")
    if not 0 <= index < len(shown):
        logger.debug("Selection %d is outside 1..%d", index + 1, len(shown))
        raise InvalidSelectionError(
            f"The index you selected is invalid, expected 1 to {len(shown)}"
        )

    chosen = shown[index]
    logger.info("Selected %s v%s", chosen.identifier, chosen.version)
    return chosen
