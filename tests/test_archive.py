from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import inspect

from sounding_archive import (
    Archive,
    ArchiveError,
    DuplicateKey,
    Location,
    NotFound,
    StoreUnavailable,
)


def test_create_lays_out_index_and_file_dir(tmp_path):
    root = tmp_path / "new_archive"
    with Archive.create(root) as arch:
        assert (root / "index.sqlite").is_file()
        assert (root / "files").is_dir()
        assert arch.index.count() == 0


def test_create_refuses_existing_archive(archive):
    with pytest.raises(StoreUnavailable):
        Archive.create(archive.root)


def test_connect_missing_archive(tmp_path):
    with pytest.raises(StoreUnavailable):
        Archive.connect(tmp_path / "nothing_here")


def test_connect_sees_existing_records(archive, gfs_file):
    with Archive.connect(archive.root) as other:
        assert other.index.count() == 1
        assert other.index.lookup_by_file_name("gfs_koun_2020010100.buf").site.short_name == "KOUN"


def test_schema_has_named_indexes(archive):
    inspector = inspect(archive.index.engine)
    assert set(inspector.get_table_names()) >= {"types", "sites", "locations", "files"}

    file_indexes = {ix["name"]: ix for ix in inspector.get_indexes("files")}
    assert file_indexes["fname"]["column_names"] == ["file_name"]
    assert file_indexes["fname"]["unique"]
    assert file_indexes["no_dups_files"]["column_names"] == ["type_id", "site_id", "init_time"]
    assert file_indexes["no_dups_files"]["unique"]

    location_indexes = {ix["name"]: ix for ix in inspector.get_indexes("locations")}
    assert location_indexes["no_dups_locations"]["column_names"] == [
        "latitude",
        "longitude",
        "elevation_meters",
    ]
    assert location_indexes["no_dups_locations"]["unique"]


def test_file_path_stays_in_file_dir(archive):
    assert archive.file_path("gfs.buf") == archive.file_dir / "gfs.buf"
    with pytest.raises(ValueError):
        archive.file_path("../index.sqlite")


def test_check_reports_both_directions(archive, gfs_file):
    archive.file_path("orphan.buf.gz").write_bytes(b"\x1f\x8b")

    missing_on_disk, not_indexed = archive.check()
    assert missing_on_disk == ["gfs_koun_2020010100.buf"]
    assert not_indexed == ["orphan.buf.gz"]

    archive.file_path("gfs_koun_2020010100.buf").write_bytes(b"data")
    archive.remove_from_data_store(["orphan.buf.gz"])
    assert archive.check() == ([], [])


def test_remove_files_removes_index_then_payload(archive, gfs_file):
    payload = archive.file_path("gfs_koun_2020010100.buf")
    payload.write_bytes(b"data")

    archive.remove_files(["gfs_koun_2020010100.buf"])

    assert not payload.exists()
    with pytest.raises(NotFound):
        archive.index.lookup_by_file_name("gfs_koun_2020010100.buf")


def test_remove_files_unknown_name_leaves_payloads(archive, gfs_file):
    payload = archive.file_path("gfs_koun_2020010100.buf")
    payload.write_bytes(b"data")

    with pytest.raises(NotFound):
        archive.remove_files(["gfs_koun_2020010100.buf", "unknown.buf"])

    assert payload.exists()
    assert archive.index.count() == 1


def test_remove_from_data_store_refuses_indexed_payloads(archive, gfs_file):
    payload = archive.file_path("gfs_koun_2020010100.buf")
    payload.write_bytes(b"data")
    with pytest.raises(ArchiveError):
        archive.remove_from_data_store(["gfs_koun_2020010100.buf"])
    assert payload.exists()


def test_remove_from_index_keeps_payload(archive, gfs_file):
    payload = archive.file_path("gfs_koun_2020010100.buf")
    payload.write_bytes(b"data")
    archive.remove_from_index(["gfs_koun_2020010100.buf"])
    assert payload.exists()
    assert archive.check() == ([], ["gfs_koun_2020010100.buf"])


def test_second_writer_gets_duplicate_key(archive, scenario, gfs_file):
    with Archive.connect(archive.root) as other:
        with pytest.raises(DuplicateKey):
            other.index.register_file(
                scenario.gfs_id,
                scenario.koun_id,
                scenario.location_id,
                "2020-01-01T00:00:00Z",
                "2020-01-01T06:00:00Z",
                "from_another_writer.buf",
            )


def test_concurrent_location_registration_yields_one_row(archive):
    def register(_):
        with Archive.connect(archive.root) as arch:
            return arch.index.register_location(
                Location(latitude=47000000, longitude=-114000000, elevation_meters=972)
            )

    with ThreadPoolExecutor(max_workers=4) as pool:
        ids = set(pool.map(register, range(8)))

    assert len(ids) == 1


def test_concurrent_file_registration_has_one_winner(archive, scenario):
    def register(n):
        try:
            archive.index.register_file(
                scenario.gfs_id,
                scenario.koun_id,
                scenario.location_id,
                "2020-01-01T00:00:00Z",
                "2020-01-01T06:00:00Z",
                f"attempt_{n}.buf",
            )
        except DuplicateKey:
            return False
        return True

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(register, range(8)))

    assert results.count(True) == 1
    assert archive.index.count() == 1


def test_check_without_file_dir_is_unavailable(archive, gfs_file):
    archive.file_dir.rmdir()
    with pytest.raises(StoreUnavailable) as excinfo:
        archive.check()
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)


def test_remove_from_data_store_bad_name_deletes_nothing(archive):
    first = archive.file_path("first.buf")
    last = archive.file_path("last.buf")
    first.write_bytes(b"data")
    last.write_bytes(b"data")

    with pytest.raises(ValueError):
        archive.remove_from_data_store(["first.buf", "../index.sqlite", "last.buf"])

    assert first.exists()
    assert last.exists()
    assert (archive.root / "index.sqlite").exists()


def test_remove_files_bad_name_keeps_index(archive, gfs_file):
    with pytest.raises(ValueError):
        archive.remove_files(["gfs_koun_2020010100.buf", "sub/dir.buf"])
    assert archive.index.count() == 1
