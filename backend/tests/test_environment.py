from __future__ import annotations

import json

import pytest
from sqlalchemy import Column, Integer, MetaData, Table, insert

from seeddump.core.errors import CyclicDependency, MetadataUnavailable
from seeddump.environment import dump_using_environment, ordered_models_from_env, retrieve_models
from seeddump.metadata.registry import Association, AssociationKind, ModelDescriptor, ModelRegistry

from sample_models import Base


class RecordingDumper:
    def __init__(self) -> None:
        self.calls: list[tuple[str, dict]] = []

    def __call__(self, session, model, **options):
        self.calls.append((model.name, options))
        return 0


def test_dumps_all_models_with_data_in_dependency_order(seeded_session, tmp_path):
    out = tmp_path / "seeds.jsonl"
    dumped = dump_using_environment({"FILE": str(out)}, session=seeded_session, base=Base)

    expected = ["Photo", "User", "Post", "Comment", "Role", "HABTM_RoleUsers"]
    assert [m.name for m in dumped] == expected
    lines = [json.loads(line) for line in out.read_text(encoding="utf-8").splitlines()]
    assert [line["model"] for line in lines] == expected
    assert [line["table"] for line in lines].count("users_roles") == 1


def test_empty_tables_are_skipped(seeded_session, registry):
    names = [m.name for m in retrieve_models({}, registry, seeded_session)]
    assert "Category" not in names
    assert "User" in names


def test_model_list_and_exclusions(seeded_session, registry):
    picked = ordered_models_from_env({"MODELS": "posts, User"}, registry, seeded_session)
    assert [m.name for m in picked] == ["User", "Post"]

    picked = ordered_models_from_env({"MODEL": "Comment", "MODELS": "User"}, registry, seeded_session)
    assert [m.name for m in picked] == ["Comment"]

    picked = ordered_models_from_env({"MODELS_EXCLUDE": "photos,Role"}, registry, seeded_session)
    assert [m.name for m in picked] == ["User", "Post", "Comment", "HABTM_RoleUsers"]


def test_unknown_model_name_aborts(seeded_session, registry):
    with pytest.raises(MetadataUnavailable):
        ordered_models_from_env({"MODELS": "Ghost"}, registry, seeded_session)


def test_append_forced_after_first_model(seeded_session, registry):
    dumper = RecordingDumper()
    dump_using_environment({"MODELS": "User,Post,Role"}, session=seeded_session, registry=registry, dumper=dumper)
    assert [(name, opts["append"]) for name, opts in dumper.calls] == [
        ("User", False),
        ("Post", True),
        ("Role", True),
    ]


def test_options_passed_to_dumper(seeded_session, registry):
    dumper = RecordingDumper()
    env = {
        "MODEL": "User",
        "APPEND": "TRUE",
        "LIMIT": "5",
        "BATCH_SIZE": "2",
        "EXCLUDE": "id, name",
        "FILE": "out/seeds.jsonl",
        "IMPORT": "true",
        "STDOUT": "false",
    }
    dump_using_environment(env, session=seeded_session, registry=registry, dumper=dumper)
    assert dumper.calls == [
        (
            "User",
            {
                "limit": 5,
                "batch_size": 2,
                "append": True,
                "exclude": ("id", "name"),
                "file": "out/seeds.jsonl",
                "stdout": False,
                "import_": True,
            },
        )
    ]


def test_cycle_aborts_before_any_dump(db_session):
    metadata = MetaData()
    a = Table("cyc_a", metadata, Column("id", Integer, primary_key=True), Column("b_id", Integer))
    b = Table("cyc_b", metadata, Column("id", Integer, primary_key=True), Column("a_id", Integer))
    metadata.create_all(db_session.get_bind())
    db_session.execute(insert(a).values(id=1, b_id=1))
    db_session.execute(insert(b).values(id=1, a_id=1))
    db_session.commit()

    reg = ModelRegistry(
        [
            ModelDescriptor("A", "cyc_a", (Association("b", AssociationKind.BELONGS_TO, target="B"),), source=a),
            ModelDescriptor("B", "cyc_b", (Association("a", AssociationKind.BELONGS_TO, target="A"),), source=b),
        ]
    )
    dumper = RecordingDumper()
    with pytest.raises(CyclicDependency):
        dump_using_environment({}, session=db_session, registry=reg, dumper=dumper)
    assert dumper.calls == []


def test_requires_base_or_registry(db_session):
    with pytest.raises(ValueError):
        dump_using_environment({}, session=db_session)
