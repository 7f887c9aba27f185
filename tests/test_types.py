"""Wire-format tests for the core dataclasses."""

import copy

from conftest import FILE, REPO, REPO_ID

from linuxfs_cli.core.types import (
    ApiResponse,
    ArchiveRequest,
    CreateRepoRequest,
    ExecRequest,
    ExecResponse,
    FileMeta,
    GetRepoResponse,
    ListFilesResponse,
    ListReposResponse,
    RepoMeta,
    UpdateRepoRequest,
)


class TestRoundTrip:
    """from_dict(to_dict(x)) keeps every field."""

    def test_repo_meta(self):
        repo = RepoMeta.from_dict(REPO)
        assert RepoMeta.from_dict(repo.to_dict()) == repo
        assert repo.to_dict() == REPO

    def test_file_meta(self):
        meta = FileMeta.from_dict(FILE)
        assert FileMeta.from_dict(meta.to_dict()) == meta
        assert meta.to_dict() == FILE

    def test_nested_responses(self):
        get = GetRepoResponse.from_dict({"repo": REPO, "file_count": 2})
        assert GetRepoResponse.from_dict(get.to_dict()) == get

        repos = ListReposResponse.from_dict({"repos": [REPO], "page": 1, "per_page": 20, "total": 1})
        assert ListReposResponse.from_dict(repos.to_dict()) == repos

        files = ListFilesResponse.from_dict({"files": [FILE], "page": 2, "per_page": 50})
        assert ListFilesResponse.from_dict(files.to_dict()) == files

    def test_exec_response(self):
        data = {"exit_code": 2, "stdout": "a\n", "stderr": "b\n", "duration_ms": 14, "truncated": True}
        result = ExecResponse.from_dict(data)
        assert result.to_dict() == data
        assert not result.ok

    def test_from_dict_does_not_share_tags(self):
        source = copy.deepcopy(REPO)
        repo = RepoMeta.from_dict(source)
        source["tags"]["team"] = "other"
        assert repo.tags == {"team": "infra"}


class TestOptionalFields:
    """Unset optional fields are omitted, never serialized as null."""

    def test_create_repo_minimal(self):
        assert CreateRepoRequest(name="scratch").to_dict() == {"name": "scratch"}

    def test_create_repo_full(self):
        request = CreateRepoRequest(name="scratch", max_size_bytes=1024, default_ttl_seconds=60)
        assert request.to_dict() == {"name": "scratch", "max_size_bytes": 1024, "default_ttl_seconds": 60}

    def test_update_repo_empty(self):
        assert UpdateRepoRequest().to_dict() == {}

    def test_update_repo_zero_ttl_is_sent(self):
        assert UpdateRepoRequest(default_ttl_seconds=0).to_dict() == {"default_ttl_seconds": 0}

    def test_update_repo_empty_tags_are_sent(self):
        assert UpdateRepoRequest(tags={}).to_dict() == {"tags": {}}

    def test_exec_request(self):
        assert ExecRequest(command="ls").to_dict() == {"command": "ls", "args": []}
        request = ExecRequest(command="cat", args=["a.txt"], timeout_seconds=5, max_output_bytes=100)
        assert request.to_dict() == {
            "command": "cat",
            "args": ["a.txt"],
            "timeout_seconds": 5,
            "max_output_bytes": 100,
        }

    def test_archive_request(self):
        assert ArchiveRequest().to_dict() == {}
        assert ArchiveRequest(path="docs").to_dict() == {"path": "docs"}

    def test_repo_without_ttl(self):
        data = dict(REPO)
        del data["default_ttl_seconds"]
        repo = RepoMeta.from_dict(data)
        assert repo.default_ttl_seconds is None
        assert "default_ttl_seconds" not in repo.to_dict()

    def test_file_without_expiry(self):
        data = dict(FILE, expires_at=None)
        assert "expires_at" not in FileMeta.from_dict(data).to_dict()


class TestEnvelope:
    def test_success(self):
        envelope = ApiResponse.from_dict({"data": {"id": REPO_ID}, "error": None})
        assert envelope.data == {"id": REPO_ID}
        assert envelope.error is None

    def test_error(self):
        envelope = ApiResponse.from_dict({"data": None, "error": {"code": 409, "message": "exists"}})
        assert envelope.data is None
        assert envelope.error.code == 409
        assert envelope.error.message == "exists"


class TestHelpers:
    def test_has_more(self):
        first = ListReposResponse(repos=[RepoMeta(id="a", name="a")], page=1, per_page=1, total=2)
        last = ListReposResponse(repos=[RepoMeta(id="b", name="b")], page=2, per_page=1, total=2)
        assert first.has_more
        assert not last.has_more

    def test_usage_ratio(self):
        repo = RepoMeta.from_dict(REPO)
        assert repo.usage_ratio == 2048 / 10485760
        assert RepoMeta(id="x", name="x").usage_ratio == 0.0
