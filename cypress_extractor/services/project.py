from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, Optional, Tuple

from cypress_extractor.core.logging import logger
from cypress_extractor.core.utils import measure_time
from cypress_extractor.models.schemas import AnalysisResult, AnalyzeOptions
from cypress_extractor.services.extractor import analyze
from cypress_extractor.services.loader import load_source, load_text
from cypress_extractor.services.vocabulary import DEFAULT_VOCABULARY, Vocabulary


def log_counts(name: str, result: AnalysisResult) -> None:
    logger.info(
        f"Analyzed {name}: {len(result.added or [])} definition(s), "
        f"{len(result.used or [])} usage(s), {len(result.tests or [])} test(s), "
        f"{len(result.errors)} diagnostic(s)"
    )


def analyze_file(
    path: str,
    options: Optional[AnalyzeOptions] = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> AnalysisResult:
    result = analyze(load_source(path), options, vocabulary)
    log_counts(path, result)
    return result


def analyze_named_text(
    name: str,
    text: str,
    options: Optional[AnalyzeOptions] = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
) -> AnalysisResult:
    result = analyze(load_text(text, filename=name), options, vocabulary)
    log_counts(name, result)
    return result


def run_parallel(
    names: Iterable[str],
    job: Callable[[str], AnalysisResult],
    max_workers: int,
) -> Dict[str, AnalysisResult]:
    """
    Run ``job`` for every name on a thread pool; the result is keyed by
    name in sorted order whatever the completion order.

    The first failure (unparseable file, invalid command name) cancels the
    jobs not yet started and is re-raised; jobs already running finish.
    """
    ordered = sorted(set(names))
    results_by_name: Dict[str, AnalysisResult] = {}

    with ThreadPoolExecutor(max_workers=max_workers) as ex:
        futures = {ex.submit(job, name): name for name in ordered}
        try:
            for fut in as_completed(futures):
                results_by_name[futures[fut]] = fut.result()
        except Exception:
            for fut in futures:
                fut.cancel()
            raise

    return {name: results_by_name[name] for name in ordered}


@measure_time
def analyze_paths(
    paths: Iterable[str],
    options: Optional[AnalyzeOptions] = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    max_workers: int = 4,
) -> Dict[str, AnalysisResult]:
    """Analyse files in parallel, keyed by path."""
    return run_parallel(
        paths,
        lambda path: analyze_file(path, options, vocabulary),
        max_workers,
    )


@measure_time
def analyze_sources(
    sources: Iterable[Tuple[str, str]],
    options: Optional[AnalyzeOptions] = None,
    vocabulary: Vocabulary = DEFAULT_VOCABULARY,
    max_workers: int = 4,
) -> Dict[str, AnalysisResult]:
    """
    Analyse in-memory (name, text) pairs, e.g. the members of an uploaded
    archive, in parallel. Failures carry the member name as ``filename``.
    """
    texts = dict(sources)
    return run_parallel(
        texts,
        lambda name: analyze_named_text(name, texts[name], options, vocabulary),
        max_workers,
    )
