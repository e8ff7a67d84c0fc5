import pytest

from cbistage.abstractions import StagingStrategy
from cbistage.bases import ConfigMapStrategy, GitStrategy, HTTPStrategy, RcloneStrategy
from cbistage.constants import ContextKind
from cbistage.datacls import (
    Helper,
    PodSpec,
    configmap_context,
    git_context,
    http_context,
    rclone_context,
)
from cbistage.exceptions import DefinitionError, UnsupportedContextKind
from cbistage.factories import StrategyFactory
from cbistage.mutator import PodSpecMutator
from cbistage.protocols import StagingStrategyProtocol
from cbistage.registry import Registry, strategy_registry


def builder_spec() -> PodSpec:
    return PodSpec.model_validate({"containers": [{"name": "builder", "image": "docker:dind"}]})


def run(strategy, context):
    """Stage `context` into a fresh pod spec and return (path, manifest)"""
    pod_spec = builder_spec()
    path = strategy.stage(context, PodSpecMutator(pod_spec, 0))
    return path, pod_spec.to_manifest()


# ============================================================================
# GIT
# ============================================================================

class TestGitStrategy:

    def test_plain_clone(self):
        path, manifest = run(GitStrategy(), git_context("https://github.com/example/app.git"))
        assert path == "/cbi-gitcontext/context"
        assert manifest["volumes"] == [{"name": "cbi-gitcontext", "emptyDir": {}}]
        assert manifest["containers"][0]["volumeMounts"] == [
            {"name": "cbi-gitcontext", "mountPath": "/cbi-gitcontext"}
        ]
        assert manifest["initContainers"] == [{
            "name": "cbi-gitcontext-init",
            "image": "containerbuilding/cbipluginhelper:latest",
            "args": ["populate-git", "https://github.com/example/app.git", "/cbi-gitcontext/context"],
            "volumeMounts": [{"name": "cbi-gitcontext", "mountPath": "/cbi-gitcontext"}],
        }]

    def test_revision_and_sub_path(self):
        ctx = git_context("https://github.com/example/app.git", revision="v1.0", sub_path="svc/api")
        path, manifest = run(GitStrategy(), ctx)
        assert path == "/cbi-gitcontext/context/svc/api"
        assert manifest["initContainers"][0]["args"][-2:] == ["--revision", "v1.0"]

    def test_ssh_secret(self):
        ctx = git_context("git@github.com:example/app.git", ssh_secret="deploy-key")
        _, manifest = run(GitStrategy(Helper(home_dir="/home/helper")), ctx)
        assert {"name": "cbi-gitcontext-ssh", "secret": {"secretName": "deploy-key", "defaultMode": 0o400}} \
            in manifest["volumes"]
        init_mounts = manifest["initContainers"][0]["volumeMounts"]
        assert {"name": "cbi-gitcontext-ssh", "mountPath": "/home/helper/.ssh", "readOnly": True} in init_mounts
        # credentials never reach the build container
        target_mounts = manifest["containers"][0]["volumeMounts"]
        assert all(m["name"] != "cbi-gitcontext-ssh" for m in target_mounts)


# ============================================================================
# CONFIG MAP
# ============================================================================

class TestConfigMapStrategy:

    def test_deref_copy(self):
        path, manifest = run(ConfigMapStrategy(), configmap_context("app-sources"))
        assert path == "/cbi-cmcontext/context"
        assert manifest["volumes"] == [
            {"name": "cbi-cmcontext-tmp", "configMap": {"name": "app-sources"}},
            {"name": "cbi-cmcontext", "emptyDir": {}},
        ]
        init = manifest["initContainers"][0]
        assert init["name"] == "cbi-cmcontext-init"
        assert init["command"] == ["cp", "-rL", "/cbi-cmcontext-tmp", "/cbi-cmcontext/context"]
        assert {"name": "cbi-cmcontext-tmp", "mountPath": "/cbi-cmcontext-tmp", "readOnly": True} \
            in init["volumeMounts"]

    def test_raw_volume_not_in_target(self):
        _, manifest = run(ConfigMapStrategy(), configmap_context("app-sources"))
        assert manifest["containers"][0]["volumeMounts"] == [
            {"name": "cbi-cmcontext", "mountPath": "/cbi-cmcontext"}
        ]


# ============================================================================
# HTTP / RCLONE
# ============================================================================

class TestHTTPStrategy:

    def test_download(self):
        path, manifest = run(HTTPStrategy(), http_context("https://example.com/app.tar.gz", sub_path="app"))
        assert path == "/cbi-httpcontext/context/app"
        assert manifest["initContainers"][0]["args"] == [
            "populate-http", "https://example.com/app.tar.gz", "/cbi-httpcontext/context"
        ]


class TestRcloneStrategy:

    def test_sync_with_config_secret(self):
        path, manifest = run(RcloneStrategy(), rclone_context("s3", "bucket/app", "rclone-conf"))
        assert path == "/cbi-rclonecontext/context"
        init = manifest["initContainers"][0]
        assert init["args"] == ["populate-rclone", "s3:bucket/app", "/cbi-rclonecontext/context"]
        assert {"name": "cbi-rclonecontext-config", "mountPath": "/root/.config/rclone", "readOnly": True} \
            in init["volumeMounts"]
        assert "cbi-rclonecontext-ssh" not in [v["name"] for v in manifest["volumes"]]

    def test_sftp_ssh_secret(self):
        _, manifest = run(RcloneStrategy(), rclone_context("sftp", "srv/app", "rclone-conf", ssh_secret="key"))
        names = [v["name"] for v in manifest["volumes"]]
        assert names == ["cbi-rclonecontext", "cbi-rclonecontext-config", "cbi-rclonecontext-ssh"]
        init_mounts = manifest["initContainers"][0]["volumeMounts"]
        assert {"name": "cbi-rclonecontext-ssh", "mountPath": "/root/.ssh.OLD", "readOnly": True} in init_mounts
        assert "/root/.ssh" not in [m["mountPath"] for m in init_mounts]


class TestStrategyBase:

    def test_wrong_kind_rejected(self):
        with pytest.raises(DefinitionError):
            GitStrategy().stage(http_context("https://example.com/a.tar"), PodSpecMutator(builder_spec(), 0))

    def test_strategies_satisfy_protocol(self):
        for strategy_class in (GitStrategy, ConfigMapStrategy, HTTPStrategy, RcloneStrategy):
            assert isinstance(strategy_class(), StagingStrategyProtocol)
            assert issubclass(strategy_class, StagingStrategy)

    def test_distinct_prefixes(self):
        prefixes = [cls.prefix for cls in strategy_registry.registry.values()]
        assert len(set(prefixes)) == len(prefixes)


# ============================================================================
# REGISTRY / FACTORY
# ============================================================================

class TestRegistryAndFactory:

    def test_registry_covers_every_kind(self):
        assert strategy_registry.get_supports() == {"Git", "ConfigMap", "HTTP", "Rclone"}
        assert strategy_registry.strategy("Git") is GitStrategy
        assert strategy_registry.strategy(ContextKind.RCLONE) is RcloneStrategy
        assert strategy_registry.strategy("Svn") is None

    def test_labels(self):
        assert set(strategy_registry.labels()) == {
            "context.git", "context.configmap", "context.http", "context.rclone"
        }

    def test_registry_copy(self):
        registry = Registry([("a", 1)])
        registry.registry["b"] = 2
        assert registry.get("b") is None

    def test_factory_shares_helper(self):
        helper = Helper(image="example.com/helper:1")
        strategy = StrategyFactory(helper).create(ContextKind.HTTP)
        assert isinstance(strategy, HTTPStrategy)
        assert strategy.helper is helper

    def test_factory_unknown_kind(self):
        with pytest.raises(UnsupportedContextKind) as exc_info:
            StrategyFactory().create("Svn")
        assert exc_info.value.kind == "Svn"
        assert "Supported kinds" in str(exc_info.value)
