# tests/unit/stream/test_unit_s3_backend.py - v1
"""Tests for stream/s3_backend.py - mocked S3 client."""

from __future__ import annotations

import io
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError

from s3_local_index.core.models import StatFlags
from s3_local_index.stream.s3_backend import S3StreamBackend

PAGE_SIZE = 2


def _not_found(operation: str) -> ClientError:
    return ClientError({"Error": {"Code": "404", "Message": "Not Found"}}, operation)


@pytest.fixture
def s3_env():
    """S3StreamBackend over a dict-backed mock client."""
    storage: dict[str, bytes] = {}
    mock_client = MagicMock()

    def put_object(Bucket, Key, Body, **kwargs):
        storage[Key] = Body

    def get_object(Bucket, Key):
        if Key not in storage:
            raise ClientError({"Error": {"Code": "NoSuchKey"}}, "GetObject")
        return {"Body": io.BytesIO(storage[Key])}

    def head_object(Bucket, Key):
        if Key not in storage:
            raise _not_found("HeadObject")
        return {
            "ContentLength": len(storage[Key]),
            "LastModified": datetime(2023, 1, 2, tzinfo=timezone.utc),
        }

    def copy_object(Bucket, CopySource, Key):
        storage[Key] = storage[CopySource["Key"]]

    def delete_object(Bucket, Key):
        storage.pop(Key, None)

    def list_objects_v2(Bucket, Prefix, MaxKeys=1000):
        keys = [k for k in sorted(storage) if k.startswith(Prefix)][:MaxKeys]
        return {"KeyCount": len(keys), "Contents": [{"Key": k} for k in keys]}

    def paginate(Bucket, Prefix="", Delimiter=None):
        contents: list[str] = []
        prefixes: list[str] = []
        for key in sorted(storage):
            if not key.startswith(Prefix):
                continue
            rest = key[len(Prefix):]
            if Delimiter and Delimiter in rest:
                common = Prefix + rest.split(Delimiter)[0] + Delimiter
                if common not in prefixes:
                    prefixes.append(common)
            else:
                contents.append(key)
        for start in range(0, max(len(contents), 1), PAGE_SIZE):
            page = {"Contents": [{"Key": k} for k in contents[start:start + PAGE_SIZE]]}
            if start == 0:
                page["CommonPrefixes"] = [{"Prefix": p} for p in prefixes]
            yield page

    mock_client.put_object = MagicMock(side_effect=put_object)
    mock_client.get_object = get_object
    mock_client.head_object = head_object
    mock_client.copy_object = copy_object
    mock_client.delete_object = MagicMock(side_effect=delete_object)
    mock_client.list_objects_v2 = list_objects_v2
    mock_client.get_paginator.return_value.paginate = paginate
    mock_client.exceptions.ClientError = ClientError

    with patch("boto3.client", return_value=mock_client) as client_factory:
        backend = S3StreamBackend(
            bucket="media", region="eu-west-1", endpoint_url="http://minio:9000",
        )
    client_factory.assert_called_once_with(
        "s3", region_name="eu-west-1", endpoint_url="http://minio:9000",
    )
    return backend, storage, mock_client


class TestUrlStat:
    def test_object(self, s3_env):
        backend, storage, _ = s3_env
        storage["uploads/2023/01/a.jpg"] = b"x" * 1000

        record = backend.url_stat("s3://uploads/2023/01/a.jpg", StatFlags.QUIET)

        assert record is not None and record.is_file
        assert record.size == 1000
        assert record.blocks == 2
        assert record.mtime == int(datetime(2023, 1, 2, tzinfo=timezone.utc).timestamp())

    def test_prefix_is_directory(self, s3_env):
        backend, storage, _ = s3_env
        storage["uploads/2023/01/a.jpg"] = b"x"
        record = backend.url_stat("s3://uploads/2023")
        assert record is not None and record.is_dir

    def test_missing(self, s3_env):
        backend, _, _ = s3_env
        assert backend.url_stat("s3://uploads/2023/01/none.jpg") is None

    def test_other_errors_propagate(self, s3_env):
        backend, _, client = s3_env
        client.head_object = MagicMock(
            side_effect=ClientError({"Error": {"Code": "AccessDenied"}}, "HeadObject")
        )
        with pytest.raises(ClientError):
            backend.url_stat("s3://uploads/2023/01/a.jpg")


class TestStreams:
    def test_write_then_read(self, s3_env):
        backend, storage, _ = s3_env
        assert backend.stream_open("s3://uploads/2023/01/a.txt", "wb") is True
        assert backend.stream_write(b"hello ") == 6
        backend.stream_write(b"world")
        backend.stream_close()
        assert storage["uploads/2023/01/a.txt"] == b"hello world"

        assert backend.stream_open("s3://uploads/2023/01/a.txt", "rb") is True
        assert backend.stream_read(5) == b"hello"
        assert backend.stream_eof() is False
        assert backend.stream_read(100) == b" world"
        assert backend.stream_eof() is True

    def test_read_missing(self, s3_env):
        backend, _, _ = s3_env
        assert backend.stream_open("s3://nope.txt", "r") is False

    def test_read_only_stream_rejects_writes(self, s3_env):
        backend, storage, _ = s3_env
        storage["a.txt"] = b"data"
        backend.stream_open("s3://a.txt", "r")
        assert backend.stream_write(b"x") == 0
        assert backend.stream_flush() is False

    def test_append_keeps_existing(self, s3_env):
        backend, storage, _ = s3_env
        storage["log.txt"] = b"one\n"
        backend.stream_open("s3://log.txt", "a")
        backend.stream_write(b"two\n")
        backend.stream_close()
        assert storage["log.txt"] == b"one\ntwo\n"

    @pytest.mark.parametrize("mode", ["r+", "r+b", "c", "c+"])
    def test_update_modes_start_at_beginning(self, s3_env, mode):
        backend, storage, _ = s3_env
        storage["a.txt"] = b"hello world"
        assert backend.stream_open("s3://a.txt", mode) is True
        assert backend.stream_read(5) == b"hello"

    @pytest.mark.parametrize("mode", ["r+", "c", "c+"])
    def test_update_modes_overwrite_in_place(self, s3_env, mode):
        backend, storage, _ = s3_env
        storage["a.txt"] = b"hello world"
        backend.stream_open("s3://a.txt", mode)
        backend.stream_write(b"HELLO")
        backend.stream_close()
        assert storage["a.txt"] == b"HELLO world"

    def test_update_without_write_leaves_object(self, s3_env):
        backend, storage, client = s3_env
        storage["a.txt"] = b"hello world"
        backend.stream_open("s3://a.txt", "r+")
        backend.stream_close()
        assert storage["a.txt"] == b"hello world"
        client.put_object.assert_not_called()

    def test_read_update_requires_existing_object(self, s3_env):
        backend, storage, _ = s3_env
        assert backend.stream_open("s3://nope.txt", "r+") is False
        assert "nope.txt" not in storage

    def test_create_mode_creates_missing_object(self, s3_env):
        backend, storage, _ = s3_env
        assert backend.stream_open("s3://new.txt", "c") is True
        backend.stream_close()
        assert storage["new.txt"] == b""

    def test_append_update_positions_at_end(self, s3_env):
        backend, storage, _ = s3_env
        storage["log.txt"] = b"one\n"
        backend.stream_open("s3://log.txt", "a+")
        assert backend.stream_eof() is True
        backend.stream_write(b"two\n")
        backend.stream_close()
        assert storage["log.txt"] == b"one\ntwo\n"

    @pytest.mark.parametrize("mode", ["w", "w+"])
    def test_truncating_modes_start_empty(self, s3_env, mode):
        backend, storage, _ = s3_env
        storage["a.txt"] = b"hello world"
        backend.stream_open("s3://a.txt", mode)
        backend.stream_write(b"new")
        backend.stream_close()
        assert storage["a.txt"] == b"new"

    def test_exclusive_create_fails_when_present(self, s3_env):
        backend, storage, _ = s3_env
        storage["a.txt"] = b"x"
        assert backend.stream_open("s3://a.txt", "x") is False
        assert backend.stream_open("s3://b.txt", "x") is True

    def test_empty_write_still_creates_object(self, s3_env):
        backend, storage, _ = s3_env
        backend.stream_open("s3://empty.txt", "w")
        backend.stream_close()
        assert storage["empty.txt"] == b""


class TestNamespace:
    def test_unlink(self, s3_env):
        backend, storage, client = s3_env
        storage["a.txt"] = b"x"
        assert backend.unlink("s3://a.txt") is True
        assert "a.txt" not in storage
        client.delete_object.assert_called_once_with(Bucket="media", Key="a.txt")

    def test_rename(self, s3_env):
        backend, storage, _ = s3_env
        storage["a.txt"] = b"x"
        assert backend.rename("s3://a.txt", "s3://dir/b.txt") is True
        assert storage == {"dir/b.txt": b"x"}

    def test_directories_are_implicit(self, s3_env):
        backend, _, _ = s3_env
        assert backend.mkdir("s3://uploads/new", 0o755, True) is True
        assert backend.rmdir("s3://uploads/new") is True


class TestListing:
    def test_readdir_files_and_subdirectories(self, s3_env):
        backend, storage, _ = s3_env
        for key in ["up/a.jpg", "up/b.jpg", "up/c.jpg", "up/sub/d.jpg", "other/e.jpg"]:
            storage[key] = b""

        assert backend.dir_opendir("s3://up") is True
        names = []
        while (name := backend.dir_readdir()) is not None:
            names.append(name)
        backend.dir_closedir()

        assert sorted(names) == ["a.jpg", "b.jpg", "c.jpg", "sub"]
        assert backend.dir_readdir() is None

    def test_iter_keys_across_pages(self, s3_env):
        backend, storage, _ = s3_env
        for key in ["uploads/2023/01/a", "uploads/2023/01/b", "uploads/2023/02/c", "x"]:
            storage[key] = b""

        assert list(backend.iter_keys()) == sorted(storage)
        assert list(backend.iter_keys("uploads/2023/01/")) == [
            "uploads/2023/01/a", "uploads/2023/01/b",
        ]
