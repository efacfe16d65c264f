import re
from datetime import date

import pytest

from birthday_interview.data.questions import DEFAULT_QUESTIONS, questions_in_category
from birthday_interview.models.records import Child, Interview, RecordKind, calculate_age
from birthday_interview.services.records import RecordService
from birthday_interview.utils.ids import generate_id

from .factories import balloon_run, birthday_media, child, exists, interview


def test_generate_id_format():
    ids = {generate_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(re.fullmatch(r"\d{13}[0-9a-z]{9}", i) for i in ids)


@pytest.mark.parametrize("on,expected", [
    (date(2024, 2, 13), 3),
    (date(2024, 2, 14), 4),
    (date(2025, 1, 1), 4),
])
def test_calculate_age(on, expected):
    assert calculate_age(date(2020, 2, 14), on) == expected


def test_models_serialize_camel_case():
    record = Interview(child_id="c1", year=2024, age=4, video_uri="/v.mp4").to_record()
    assert record["childId"] == "c1"
    assert record["videoUri"] == "/v.mp4"
    assert "transcription" not in record
    assert record["id"]

    photo = Child(name="Nina", birthday="2020-02-14", photoUri="/p.jpg", nickname="Nini").to_record()
    assert photo["birthday"] == "2020-02-14"
    assert photo["photoUri"] == "/p.jpg"
    assert photo["nickname"] == "Nini"


def test_record_kind_fields():
    assert RecordKind.CHILDREN.file_field == "photoUri"
    assert RecordKind.BIRTHDAY_MEDIA.file_field == "uri"
    assert RecordKind.INTERVIEWS.storage_key == "@birthday_interview_sessions"
    assert RecordKind.BALLOON_RUNS.category.value == "balloon"


def test_questions_in_category():
    assert len(questions_in_category()) == len(DEFAULT_QUESTIONS)
    assert all(q.category == "favorites" for q in questions_in_category("favorites"))
    with pytest.raises(ValueError):
        questions_in_category("weather")


@pytest.mark.asyncio
async def test_list_for_child_newest_first(store):
    for i, year in enumerate([2022, 2024, 2023]):
        await store.upsert(RecordKind.INTERVIEWS, interview(f"i{i}", year=year))
    await store.upsert(RecordKind.INTERVIEWS, interview("other", child_id="c2"))

    interviews = await RecordService(store).get_interviews_for_child("c1")

    assert [i["year"] for i in interviews] == [2024, 2023, 2022]


@pytest.mark.asyncio
async def test_cascade_delete(store, make_file):
    files = {
        "photo": make_file("p/c1.jpg"),
        "i1": make_file("v/i1.mp4"),
        "i2": make_file("v/i2.mp4"),
        "b1": make_file("b/b1.mp4"),
        "m1": make_file("m/m1.jpg"),
        "m2": make_file("m/m2.jpg"),
        "m3": make_file("m/m3.jpg"),
        "keep": make_file("v/keep.mp4"),
    }
    await store.upsert(RecordKind.CHILDREN, child("c1", photoUri=files["photo"]))
    await store.upsert(RecordKind.CHILDREN, child("c2", name="Theo"))
    await store.upsert(RecordKind.INTERVIEWS, interview("i1", video_uri=files["i1"]))
    await store.upsert(RecordKind.INTERVIEWS, interview("i2", year=2025, video_uri=files["i2"]))
    await store.upsert(RecordKind.INTERVIEWS, interview("keep", child_id="c2", video_uri=files["keep"]))
    await store.upsert(RecordKind.BALLOON_RUNS, balloon_run("b1", video_uri=files["b1"]))
    for name in ("m1", "m2", "m3"):
        await store.upsert(RecordKind.BIRTHDAY_MEDIA, birthday_media(name, uri=files[name]))

    result = await RecordService(store).delete_child("c1")

    assert result.child_deleted
    assert (result.interviews, result.balloon_runs, result.birthday_media) == (2, 1, 3)
    assert result.files_attempted == result.files_deleted == 7
    assert await store.counts() == {"children": 1, "interviews": 1, "balloonRuns": 0, "birthdayMedia": 0}
    assert exists(files["keep"])
    assert not any(exists(path) for key, path in files.items() if key != "keep")


@pytest.mark.asyncio
async def test_cascade_delete_with_missing_files(store):
    await store.upsert(RecordKind.CHILDREN, child("c1"))
    await store.upsert(RecordKind.INTERVIEWS, interview("i1", video_uri="/gone.mp4"))

    result = await RecordService(store).delete_child("c1")

    assert result.child_deleted
    assert result.files_attempted == 1
    assert result.files_deleted == 0
    assert await store.get_collection(RecordKind.INTERVIEWS) == []


@pytest.mark.asyncio
async def test_compare_years_oldest_first(store):
    await store.upsert(RecordKind.INTERVIEWS, interview("i25", year=2025, age=5))
    await store.upsert(RecordKind.INTERVIEWS, interview("i24", year=2024, age=4))

    rows = await RecordService(store).compare_years("c1", "basics")

    q1 = next(r for r in rows if r.question_id == "q1")
    assert [a.year for a in q1.answers] == [2024, 2025]
    assert [a.answer for a in q1.answers] == [{"text": "4"}, {"text": "5"}]
    assert all(r.category == "basics" for r in rows)


@pytest.mark.asyncio
async def test_per_child_balloon_runs_and_media(store):
    await store.upsert(RecordKind.BALLOON_RUNS, balloon_run("b23", year=2023))
    await store.upsert(RecordKind.BALLOON_RUNS, balloon_run("b24", year=2024))
    await store.upsert(RecordKind.BALLOON_RUNS, balloon_run("other", child_id="c2"))
    await store.upsert(RecordKind.BIRTHDAY_MEDIA, birthday_media("m1", year=2022))
    await store.upsert(RecordKind.BIRTHDAY_MEDIA, birthday_media("m2", year=2025))
    service = RecordService(store)

    runs = await service.get_balloon_runs_for_child("c1")
    media = await service.get_birthday_media_for_child("c1")

    assert [r["id"] for r in runs] == ["b24", "b23"]
    assert [m["id"] for m in media] == ["m2", "m1"]
    assert await service.get_birthday_media_for_child("c9") == []
