"""Tests for the compilation cache and artifact stores."""

from __future__ import annotations

import logging
import threading

import pytest

from quill import (
    Artifact,
    CacheWriteError,
    DictLoader,
    Environment,
    FileSystemArtifactStore,
    MemoryArtifactStore,
    cache_key,
)


class FailingStore(MemoryArtifactStore):
    """Store whose writes always fail."""

    __slots__ = ()

    def store(self, key, artifact):
        raise CacheWriteError(f"read-only store, cannot persist {artifact.name}")


class TestCacheKey:
    def test_separators_become_dots(self):
        assert cache_key("emails/welcome").startswith("emails.welcome__")
        assert cache_key("emails\\welcome").startswith("emails.welcome__")

    def test_checksum_suffix_distinguishes_names(self):
        assert cache_key("a/b") != cache_key("a.b")
        assert cache_key("a/b") != cache_key("a\\b")

    def test_stable(self):
        assert cache_key("layout.main") == cache_key("layout.main")
        assert cache_key("layout.main").rsplit("__", 1)[1].isdigit()


class TestCompilationCache:
    def test_compiles_once(self):
        env = Environment(loader=DictLoader({"page": "<h1>{{ $title }}</h1>"}))
        assert env.render("page", title="a") == "<h1>a</h1>"
        assert env.render("page", title="b") == "<h1>b</h1>"
        stats = env.cache.stats()
        assert stats["compiles"] == 1
        assert stats["misses"] == 1
        assert stats["hits"] == 1

    def test_same_template_object_while_fresh(self):
        env = Environment(loader=DictLoader({"page": "x"}))
        assert env.get_template("page") is env.get_template("page")

    def test_stale_source_recompiles(self):
        loader = DictLoader({"page": ("old", 10.0)})
        env = Environment(loader=loader)
        assert env.render("page") == "old"
        loader.set("page", "new")
        assert env.render("page") == "new"
        assert env.cache.stats()["compiles"] == 2

    def test_unchanged_mtime_keeps_artifact(self):
        loader = DictLoader({"page": ("old", 10.0)})
        env = Environment(loader=loader)
        env.render("page")
        loader.set("page", "new", mtime=10.0)
        assert env.render("page") == "old"

    def test_compile_returns_artifact(self):
        env = Environment(loader=DictLoader({"page": ("<p>Hi</p>", 42.0)}))
        artifact = env.compile("page")
        assert isinstance(artifact, Artifact)
        assert artifact.name == "page"
        assert artifact.mtime == 42.0
        assert "<p>Hi</p>" in artifact.code

    def test_artifact_is_python_source(self):
        env = Environment(loader=DictLoader({"page": "@if($x)\nyes\n@endif\n"}))
        compile(env.compile("page").code, "<page>", "exec")

    def test_stored_artifact_reused_by_new_cache(self):
        store = MemoryArtifactStore()
        loader = DictLoader({"page": ("cached", 5.0)})
        Environment(loader=loader, artifact_store=store).render("page")
        assert len(store) == 1

        env = Environment(loader=loader, artifact_store=store)
        assert env.render("page") == "cached"
        assert env.cache.stats()["compiles"] == 0

    def test_store_name_mismatch_recompiles(self):
        store = MemoryArtifactStore()
        store.store(cache_key("page"), Artifact("other", "__rt.write('wrong')\n", 99.0))
        env = Environment(loader=DictLoader({"page": ("right", 1.0)}), artifact_store=store)
        assert env.render("page") == "right"

    def test_store_failure_is_not_memoized(self, caplog):
        env = Environment(loader=DictLoader({"page": "ok"}), artifact_store=FailingStore())
        with caplog.at_level(logging.WARNING, logger="quill.artifact_cache"):
            assert env.render("page") == "ok"
            assert env.render("page") == "ok"
        stats = env.cache.stats()
        assert stats["compiles"] == 2
        assert stats["store_failures"] == 2
        assert "without caching" in caplog.text

    def test_clear_cache_forces_recompile(self):
        env = Environment(loader=DictLoader({"page": "x"}))
        env.render("page")
        assert env.clear_cache() is True
        env.render("page")
        assert env.cache.stats()["compiles"] == 2

    def test_concurrent_first_render_compiles_once(self):
        env = Environment(loader=DictLoader({"page": "<p>{{ $n }}</p>"}))
        barrier = threading.Barrier(8)
        results: list[str] = []
        errors: list[BaseException] = []

        def worker(n):
            try:
                barrier.wait()
                results.append(env.render("page", n=n))
            except BaseException as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert sorted(results) == sorted(f"<p>{i}</p>" for i in range(8))
        assert env.cache.stats()["compiles"] == 1

    def test_missing_template_raises(self):
        from quill import TemplateNotFoundError

        env = Environment(loader=DictLoader({}))
        with pytest.raises(TemplateNotFoundError):
            env.compile("nope")


class TestFileSystemArtifactStore:
    def test_store_and_load(self, tmp_path):
        store = FileSystemArtifactStore(tmp_path / "cache")
        artifact = Artifact("home", "__rt.write('hi')\n", 1700000000.5)
        store.store("home__1", artifact)
        assert store.load("home__1") == artifact

    def test_header_line(self, tmp_path):
        store = FileSystemArtifactStore(tmp_path)
        store.store("k", Artifact("layout.main", "pass\n", 3.25))
        first, _, rest = (tmp_path / "k.py").read_text().partition("\n")
        assert first == '# quill-artifact {"name": "layout.main", "mtime": 3.25}'
        assert rest == "pass\n"

    def test_load_missing(self, tmp_path):
        assert FileSystemArtifactStore(tmp_path).load("absent") is None

    def test_load_without_header(self, tmp_path):
        (tmp_path / "k.py").write_text("__rt.write('x')\n")
        assert FileSystemArtifactStore(tmp_path).load("k") is None

    def test_load_malformed_header(self, tmp_path):
        (tmp_path / "k.py").write_text("# quill-artifact {not json\npass\n")
        assert FileSystemArtifactStore(tmp_path).load("k") is None

    def test_no_temporary_files_left(self, tmp_path):
        store = FileSystemArtifactStore(tmp_path)
        store.store("k", Artifact("k", "pass\n", 1.0))
        assert [p.name for p in tmp_path.iterdir()] == ["k.py"]

    def test_write_failure_raises(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = FileSystemArtifactStore(blocker / "cache")
        with pytest.raises(CacheWriteError, match="Cannot write artifact"):
            store.store("k", Artifact("k", "pass\n", 1.0))

    def test_clear_and_stats(self, tmp_path):
        store = FileSystemArtifactStore(tmp_path)
        store.store("a", Artifact("a", "pass\n", 1.0))
        store.store("b", Artifact("b", "pass\n", 1.0))
        stats = store.stats()
        assert stats["file_count"] == 2
        assert stats["total_bytes"] > 0
        assert store.clear() is True
        assert store.stats() == {"file_count": 0, "total_bytes": 0}

    def test_clear_missing_directory(self, tmp_path):
        assert FileSystemArtifactStore(tmp_path / "never").clear() is True


class TestPersistentEnvironment:
    def test_artifacts_survive_environment(self, tmp_path):
        loader = DictLoader({"page": ("<b>{{ $x }}</b>", 100.0)})
        first = Environment(loader=loader, cache_dir=tmp_path)
        assert first.render("page", x=1) == "<b>1</b>"
        assert (tmp_path / f"{cache_key('page')}.py").is_file()

        second = Environment(loader=loader, cache_dir=tmp_path)
        assert second.render("page", x=2) == "<b>2</b>"
        assert second.cache.stats()["compiles"] == 0

    def test_persisted_artifact_recompiled_when_source_newer(self, tmp_path):
        loader = DictLoader({"page": ("v1", 100.0)})
        Environment(loader=loader, cache_dir=tmp_path).render("page")
        loader.set("page", "v2")

        env = Environment(loader=loader, cache_dir=tmp_path)
        assert env.render("page") == "v2"
        assert env.cache.stats()["compiles"] == 1

    def test_fixture_environment(self, env_fs_cache):
        env_fs_cache.loader.set("page", "hello")
        assert env_fs_cache.render("page") == "hello"
        assert env_fs_cache.artifact_store.stats()["file_count"] == 1
