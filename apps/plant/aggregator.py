from typing import List, Sequence

from apps.plant.models import AnalysisResult, Plant


def aggregate_results(results: Sequence[AnalysisResult], language: str) -> AnalysisResult:
    """
    Merge per-image results of one batch into a single report.

    - plants: concatenated in submission order
    - warnings: concatenated, exact duplicates dropped, first occurrence kept
    - plant_count: sum of each result's own plant_count, NOT len(plants);
      a constituent that miscounts passes its error through unchanged
    """
    if not results:
        raise ValueError("Cannot aggregate an empty batch")

    all_plants: List[Plant] = []
    all_warnings: List[str] = []
    total_count = 0
    for res in results:
        all_plants.extend(res.plants)
        all_warnings.extend(res.warnings)
        total_count += res.plant_count

    return AnalysisResult(
        language=language,
        plant_count=total_count,
        plants=all_plants,
        warnings=list(dict.fromkeys(all_warnings)),
    )
