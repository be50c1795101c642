"""
Main migrator class for the Movable Type to WordPress migration tool.

Runs the entity pipelines in dependency order through the batch transfer
engine, with the taxonomy count pass between the post category links and
the comments. The first failure stops the run; tables already migrated
stay as they are.
"""

from __future__ import annotations

import logging

from mt_migrator.core.context import MigrationContext
from mt_migrator.core.engine import BatchTransferEngine
from mt_migrator.core.state import MigrationState
from mt_migrator.exceptions import MigrationAbortedError
from mt_migrator.services.pipelines import (
    AssetPipeline,
    CategoryPipeline,
    CommentPipeline,
    PostCategoryPipeline,
    PostPipeline,
    TablePipeline,
    UserPipeline,
)
from mt_migrator.services.taxonomy import update_term_counts
from mt_migrator.utils.logging import log_with_context

TAXONOMY_COUNT_STEP = "taxonomy_counts"


class MovableTypeToWordPressMigrator:
    """Main class for migrating a Movable Type database into WordPress."""

    def __init__(self, ctx: MigrationContext, state: MigrationState | None = None):
        self.ctx = ctx
        self.state = state if state is not None else MigrationState()
        self.engine = BatchTransferEngine(
            ctx.batch_size, show_progress=ctx.show_progress
        )

    def _transfer(self, pipeline: TablePipeline) -> None:
        result = self.state.begin_transfer(pipeline.name)
        try:
            self.engine.run(pipeline, result)
        except Exception as e:
            self.state.record_error(pipeline.name, e)
            raise MigrationAbortedError(
                f"Migration stopped in {pipeline.name}: {e}", pipeline=pipeline.name
            ) from e

    def _update_term_counts(self) -> None:
        try:
            self.state.term_counts = update_term_counts(self.ctx)
        except Exception as e:
            self.state.record_error(TAXONOMY_COUNT_STEP, e)
            raise MigrationAbortedError(
                f"Migration stopped in {TAXONOMY_COUNT_STEP}: {e}",
                pipeline=TAXONOMY_COUNT_STEP,
            ) from e

    def migrate(self) -> MigrationState:
        """
        Run the whole migration.

        Order: categories, users, posts, post categories, taxonomy counts,
        comments, assets. Every step clears its destination tables first,
        so running again replaces the previous run's rows.

        Returns:
            The populated migration state

        Raises:
            MigrationAbortedError: When a step fails; later steps do not run
        """
        self.state.start()
        log_with_context(
            logging.INFO,
            f"Migrating Movable Type blogs {self.ctx.blog_ids} "
            f"in pages of {self.ctx.batch_size}",
        )

        try:
            self._transfer(CategoryPipeline(self.ctx))
            self._transfer(UserPipeline(self.ctx))
            self._transfer(PostPipeline(self.ctx))
            self._transfer(PostCategoryPipeline(self.ctx))
            self._update_term_counts()
            self._transfer(CommentPipeline(self.ctx))
            self._transfer(AssetPipeline(self.ctx))
        finally:
            self.state.finish()

        log_with_context(
            logging.INFO,
            f"Migration finished: {self.state.total_rows} rows transferred",
            rows=self.state.total_rows,
        )
        return self.state
