"""Record queries that span collections: per-child lists, cascade delete,
and the year-over-year answer comparison."""

import logging
from typing import Any, Optional

from ..data.questions import questions_in_category
from ..models.backup import CascadeDeleteResult
from ..models.records import QuestionComparison, RecordKind, YearAnswer
from .media_storage import delete_file
from .metadata_store import MetadataStore, get_metadata_store

logger = logging.getLogger(__name__)

_DEPENDENT_KINDS = (
    RecordKind.INTERVIEWS,
    RecordKind.BALLOON_RUNS,
    RecordKind.BIRTHDAY_MEDIA,
)


class RecordService:
    def __init__(self, store: Optional[MetadataStore] = None):
        self.store = store or get_metadata_store()

    async def list_for_child(self, kind: RecordKind, child_id: str) -> list[dict[str, Any]]:
        """Records belonging to a child, newest year first."""
        records = await self.store.get_collection(kind)
        mine = [r for r in records if r.get("childId") == child_id]
        return sorted(mine, key=lambda r: r.get("year") or 0, reverse=True)

    async def get_interviews_for_child(self, child_id: str) -> list[dict[str, Any]]:
        return await self.list_for_child(RecordKind.INTERVIEWS, child_id)

    async def get_balloon_runs_for_child(self, child_id: str) -> list[dict[str, Any]]:
        return await self.list_for_child(RecordKind.BALLOON_RUNS, child_id)

    async def get_birthday_media_for_child(self, child_id: str) -> list[dict[str, Any]]:
        return await self.list_for_child(RecordKind.BIRTHDAY_MEDIA, child_id)

    async def delete_child(self, child_id: str) -> CascadeDeleteResult:
        """Delete a child together with every record and file that belongs
        to them. File deletion is best-effort; failures become warnings."""
        result = CascadeDeleteResult()
        doomed_files: list[Optional[str]] = []

        for kind in _DEPENDENT_KINDS:
            records = await self.store.get_collection(kind)
            removed = [r for r in records if r.get("childId") == child_id]
            if not removed:
                continue
            await self.store.save_collection(
                kind, [r for r in records if r.get("childId") != child_id]
            )
            doomed_files.extend(r.get(kind.file_field) for r in removed)
            if kind is RecordKind.INTERVIEWS:
                result.interviews = len(removed)
            elif kind is RecordKind.BALLOON_RUNS:
                result.balloon_runs = len(removed)
            else:
                result.birthday_media = len(removed)

        children = await self.store.get_collection(RecordKind.CHILDREN)
        child = next((c for c in children if c.get("id") == child_id), None)
        if child is not None:
            await self.store.save_collection(
                RecordKind.CHILDREN, [c for c in children if c.get("id") != child_id]
            )
            result.child_deleted = True
            doomed_files.append(child.get(RecordKind.CHILDREN.file_field))

        for path in doomed_files:
            if not path:
                continue
            result.files_attempted += 1
            deleted, warning = delete_file(path)
            if deleted:
                result.files_deleted += 1
            if warning:
                result.warnings.append(warning)

        logger.info(
            f"Deleted child {child_id}: {result.interviews} interviews, "
            f"{result.balloon_runs} balloon runs, {result.birthday_media} media, "
            f"{result.files_deleted}/{result.files_attempted} files"
        )
        return result

    async def compare_years(
        self, child_id: str, category: Optional[str] = None,
    ) -> list[QuestionComparison]:
        """Answers to each default question across the child's interviews,
        oldest first."""
        interviews = list(reversed(await self.get_interviews_for_child(child_id)))
        rows = []
        for question in questions_in_category(category):
            row = QuestionComparison(
                question_id=question.id,
                text=question.text,
                category=question.category,
            )
            for interview in interviews:
                answers = interview.get("answers") or {}
                row.answers.append(YearAnswer(
                    interview_id=interview["id"],
                    year=interview.get("year") or 0,
                    age=interview.get("age"),
                    answer=answers.get(question.id),
                ))
            rows.append(row)
        return rows
