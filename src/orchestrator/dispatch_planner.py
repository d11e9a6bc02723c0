"""
Dispatch Planner Module
Single Responsibility: Decide submission grouping and conversation clearing
"""

from typing import List, Literal

from pydantic import BaseModel, Field

from src.models.batch_models import ResolvedSentence
from src.utils.logging_config import get_logger

logger = get_logger(__name__)

Discipline = Literal["per_sentence_clear", "async_batch", "sync_sequential"]


class DispatchStep(BaseModel):
    """Datasources to clear, then sentences to submit and poll together"""

    clear_datasource_ids: List[int] = Field(default_factory=list)
    sentences: List[ResolvedSentence]


class DispatchPlan(BaseModel):
    """Ordered steps; a step starts only after the previous one resolved"""

    discipline: Discipline
    steps: List[DispatchStep]


class DispatchPlanner:
    """
    Chooses the dispatch discipline from configuration flags.

    Conversation state is only meaningful when a single sentence can mutate
    it at a time, so batched submission is used only in async mode without
    per-sentence clearing.
    """

    def __init__(self, clear_conversation: bool, async_mode: bool):
        self.clear_conversation = clear_conversation
        self.async_mode = async_mode

    def plan(self, sentences: List[ResolvedSentence]) -> DispatchPlan:
        """
        Builds the dispatch plan for resolved sentences.

        Args:
            sentences: Sentences in batch order, bound to datasources

        Returns:
            DispatchPlan with one step per submit-and-poll round
        """
        if self.clear_conversation:
            plan = DispatchPlan(
                discipline="per_sentence_clear",
                steps=[
                    DispatchStep(clear_datasource_ids=[s.datasource_id], sentences=[s])
                    for s in sentences
                ],
            )
        else:
            all_ds_ids = self._distinct_datasources(sentences)

            if self.async_mode:
                plan = DispatchPlan(
                    discipline="async_batch",
                    steps=[
                        DispatchStep(clear_datasource_ids=all_ds_ids, sentences=list(sentences))
                    ]
                    if sentences
                    else [],
                )
            else:
                plan = DispatchPlan(
                    discipline="sync_sequential",
                    steps=[
                        DispatchStep(
                            clear_datasource_ids=all_ds_ids if i == 0 else [],
                            sentences=[s],
                        )
                        for i, s in enumerate(sentences)
                    ],
                )

        logger.info(
            f"Dispatch plan: discipline={plan.discipline}, steps={len(plan.steps)}, "
            f"sentences={len(sentences)}"
        )
        return plan

    @staticmethod
    def _distinct_datasources(sentences: List[ResolvedSentence]) -> List[int]:
        seen: List[int] = []
        for s in sentences:
            if s.datasource_id not in seen:
                seen.append(s.datasource_id)
        return seen
