"""Seed-locked dataset generation across a variation sweep."""

import asyncio
import logging
from datetime import datetime
from typing import Any, AsyncIterator, Callable, Dict, List, Mapping, Optional, Union

from lumenset.core.base_backend import BaseBackend
from lumenset.core.errors import ContractViolationError
from lumenset.core.models import (
    GenerationResult,
    ModificationRecord,
    ProgressEvent,
    ProgressStatus,
    RunStage,
    Variation,
)
from lumenset.utils.prompt_mutator import PromptMutator, parse_structured_prompt

logger = logging.getLogger(__name__)

BASE_REFERENCE_NAME = "Base Reference (0°, 0°)"

ProgressListener = Callable[[ProgressEvent], Any]


class DatasetGenerator:
    """Orchestrator for one or more dataset runs against a backend.

    A run first generates a base reference image without a seed, locks the
    seed the service picked, and then generates every variation from the
    original base prompt with that seed. A failed variation is reported and
    skipped; a failed base image aborts the run.

    Attributes:
        backend: Backend used for every submission
        mutator: Prompt mutator applied per variation
    """

    def __init__(self, backend: BaseBackend, mutator: Optional[PromptMutator] = None):
        """Initialize the dataset generator.

        Args:
            backend: Backend used for generation
            mutator: Optional mutator (defaults to the standard tables)
        """
        self.backend = backend
        self.mutator = mutator or PromptMutator()

        logger.info(f"Initialized DatasetGenerator with backend: {backend.name}")

    @staticmethod
    def base_modifications(variations: List[Variation]) -> ModificationRecord:
        """Modifications for the base reference: front, eye level, mid zoom.

        Everything else (lighting, background, advanced settings) comes from the
        first variation so the reference matches the sweep.
        """
        return variations[0].modifications.model_copy(
            update={"rotation_degrees": 0, "tilt_degrees": 0, "zoom_level": 5},
            deep=True
        )

    async def generate_dataset(
        self,
        base_prompt: Union[str, Mapping[str, Any]],
        variations: List[Variation],
        on_variation_complete: Optional[ProgressListener] = None
    ) -> List[GenerationResult]:
        """Generate the base reference and every variation with one locked seed.

        Args:
            base_prompt: Base structured prompt (mapping or JSON text)
            variations: Variations to generate, in order
            on_variation_complete: Called with a ProgressEvent at every transition

        Returns:
            The base reference result followed by each successful variation

        Raises:
            ValueError: If variations is empty
            GenerationError: If the base reference image fails
        """
        if not variations:
            raise ValueError("No variations to generate")

        def emit(event: ProgressEvent) -> None:
            if on_variation_complete:
                on_variation_complete(event)

        base_document = parse_structured_prompt(base_prompt)
        total = len(variations)
        results: List[GenerationResult] = []

        # Base reference without a seed so the service picks one
        base_mods = self.base_modifications(variations)
        emit(ProgressEvent(
            stage=RunStage.BASE, index=0, total=1, name=BASE_REFERENCE_NAME,
            status=ProgressStatus.GENERATING, progress=0.0
        ))
        try:
            base_result = await self.backend.generate_image(
                self.mutator.mutate(base_document, base_mods),
                seed=None,
                on_progress=lambda attempt, max_attempts: emit(ProgressEvent(
                    stage=RunStage.BASE, index=0, total=1, name=BASE_REFERENCE_NAME,
                    status=ProgressStatus.GENERATING, progress=attempt / max_attempts
                ))
            )
            if base_result.seed is None:
                raise ContractViolationError("Base image came back without a seed")
        except Exception as e:
            logger.error(f"Base reference generation failed: {e}")
            emit(ProgressEvent(
                stage=RunStage.BASE, index=0, total=1, name=BASE_REFERENCE_NAME,
                status=ProgressStatus.ERROR, error=str(e)
            ))
            raise

        locked_seed = base_result.seed
        logger.info(f"Seed locked at {locked_seed} for {total} variations")

        base_record = GenerationResult(
            variation_name=BASE_REFERENCE_NAME,
            image_url=base_result.image_url,
            seed=locked_seed,
            structured_prompt=base_result.structured_prompt,
            modifications=base_mods,
            timestamp=datetime.now()
        )
        results.append(base_record)
        emit(ProgressEvent(
            stage=RunStage.BASE, index=0, total=1, name=BASE_REFERENCE_NAME,
            status=ProgressStatus.COMPLETED, result=base_record
        ))

        for index, variation in enumerate(variations):
            emit(ProgressEvent(
                index=index, total=total, name=variation.name,
                status=ProgressStatus.GENERATING, progress=0.0
            ))
            try:
                # always from the original base, never a previous variation
                modified = self.mutator.mutate(base_document, variation.modifications)
                image = await self.backend.generate_image(
                    modified,
                    seed=locked_seed,
                    on_progress=lambda attempt, max_attempts, index=index, variation=variation: emit(
                        ProgressEvent(
                            index=index, total=total, name=variation.name,
                            status=ProgressStatus.GENERATING, progress=attempt / max_attempts
                        )
                    )
                )

                record = GenerationResult(
                    variation_name=variation.name,
                    image_url=image.image_url,
                    seed=locked_seed,
                    structured_prompt=image.structured_prompt or modified,
                    modifications=variation.modifications,
                    timestamp=datetime.now()
                )
                results.append(record)
                logger.info(f"Completed {variation.name} ({index + 1}/{total})")
                emit(ProgressEvent(
                    index=index, total=total, name=variation.name,
                    status=ProgressStatus.COMPLETED, result=record
                ))

            except Exception as e:
                logger.error(f"Failed to generate variation {index} ({variation.name}): {e}")
                emit(ProgressEvent(
                    index=index, total=total, name=variation.name,
                    status=ProgressStatus.ERROR, error=str(e)
                ))

        logger.info(
            f"Dataset run finished: {len(results) - 1}/{total} variations generated "
            f"with seed {locked_seed}"
        )
        return results

    async def stream_dataset(
        self,
        base_prompt: Union[str, Mapping[str, Any]],
        variations: List[Variation]
    ) -> AsyncIterator[ProgressEvent]:
        """Run generate_dataset and yield its progress events as they happen.

        Completed events carry the result records. Leaving the iteration early
        cancels the run. A fatal failure is raised after its error event.
        """
        events: "asyncio.Queue[Optional[ProgressEvent]]" = asyncio.Queue()
        run = asyncio.create_task(
            self.generate_dataset(base_prompt, variations, events.put_nowait)
        )
        run.add_done_callback(lambda _: events.put_nowait(None))

        try:
            while True:
                event = await events.get()
                if event is None:
                    break
                yield event
            await run
        finally:
            if not run.done():
                run.cancel()

    def get_queue_length(self) -> int:
        return self.backend.get_queue_length()

    def clear_queue(self) -> int:
        return self.backend.clear_queue()

    def summarize(self, results: List[GenerationResult]) -> Dict[str, Any]:
        """Seed and counts for a finished run."""
        seeds = {result.seed for result in results}
        return {
            "backend": self.backend.name,
            "images": len(results),
            "variations": len([r for r in results if r.variation_name != BASE_REFERENCE_NAME]),
            "seed": seeds.pop() if len(seeds) == 1 else None,
        }
