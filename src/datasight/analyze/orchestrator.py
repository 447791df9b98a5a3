from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Optional

from ..collaborators import AuthBackend, BlobStore, DatasetStore
from ..config import InsightsConfig
from ..constants import CANCELLED_MESSAGE, STORAGE_FAILURE_MESSAGE, DatasetStatus
from ..errors import AuthError, ConflictError, NotFoundError, StorageError, ValidationError
from ..logging import InsightsLogger
from ..models import AnalysisRequest, InsightsOutcome
from .provider_factory import ProviderFactory
from .truncation import truncate_rows


class InsightsOrchestrator:
    """Runs one insight generation for a stored dataset and records its terminal status."""

    def __init__(
        self,
        config: InsightsConfig,
        auth: AuthBackend,
        datasets: DatasetStore,
        blobs: BlobStore,
        factory: Optional[ProviderFactory] = None,
        logger: Optional[InsightsLogger] = None,
    ) -> None:
        self.config = config
        self.auth = auth
        self.datasets = datasets
        self.blobs = blobs
        self.logger = logger or InsightsLogger(run_id="insights")
        self.factory = factory or ProviderFactory(config, logger=self.logger)

    async def generate_insights(
        self,
        dataset_id: Optional[str],
        provider_type: Optional[str] = None,
    ) -> InsightsOutcome:
        """
        Generate insights for ``dataset_id``.

        Steps:
        1. Validate input, resolve the caller and their dataset
        2. Claim the dataset (atomic move to ``processing``)
        3. Download and truncate the CSV
        4. Call the resolved provider
        5. Persist ``completed`` or ``failed``

        Every failure after the claim is recorded as ``failed`` and re-raised.
        """
        if not dataset_id or not str(dataset_id).strip():
            raise ValidationError("Dataset ID is required")

        logger = self.logger.bind(dataset_id)

        user = await self.auth.get_current_user()
        if user is None:
            raise AuthError("Unauthorized")

        dataset = await self.datasets.get_dataset(dataset_id, user.id)
        if dataset is None:
            raise NotFoundError("Dataset not found")

        if not await self.datasets.try_mark_processing(dataset_id):
            logger.warning("Insights generation already in progress")
            raise ConflictError("Insights generation already in progress")

        try:
            with logger.stage("download"):
                try:
                    content = await self.blobs.download_file(dataset.storage_path)
                except Exception as exc:
                    await self._mark_failed(dataset_id, STORAGE_FAILURE_MESSAGE, logger)
                    raise StorageError("Failed to download file") from exc

            csv_data = content.decode("utf-8", errors="replace")
            limited = truncate_rows(csv_data, self.config.max_rows)
            logger.info(
                "CSV loaded",
                size_bytes=len(content),
                truncated=limited != csv_data,
            )

            with logger.stage("llm_analysis"):
                provider = self.factory.create_provider(provider_type)
                result = await provider.analyze_request(
                    AnalysisRequest(
                        csv_data=limited,
                        file_name=dataset.file_name,
                        user_prompt=dataset.prompt,
                        template=dataset.template,
                    )
                )

            await self.datasets.update_dataset_status(
                dataset_id,
                {
                    "insights_status": DatasetStatus.COMPLETED,
                    "insights_markdown": result.insights,
                    "insights_generated_at": datetime.now(timezone.utc).isoformat(),
                    "insights_model": result.model,
                    "insights_tokens_used": result.tokens_used,
                    "insights_cost": result.cost,
                    "insights_error": None,
                },
            )
        except StorageError:
            raise
        except asyncio.CancelledError:
            await self._mark_failed(dataset_id, CANCELLED_MESSAGE, logger)
            raise
        except Exception as exc:
            await self._mark_failed(dataset_id, str(exc) or "Unknown error occurred", logger)
            raise

        logger.info(
            "Insights generated",
            model=result.model,
            tokens_used=result.tokens_used,
            cost_usd=result.cost,
        )
        return InsightsOutcome(
            dataset_id=dataset_id,
            model=result.model,
            tokens_used=result.tokens_used,
            cost=result.cost,
        )

    async def _mark_failed(self, dataset_id: str, message: str, logger: InsightsLogger) -> None:
        try:
            await self.datasets.update_dataset_status(
                dataset_id,
                {"insights_status": DatasetStatus.FAILED, "insights_error": message},
            )
        except Exception as secondary:
            logger.warning("Failed to record failure status", error=str(secondary))
