import pytest
from pydantic import ValidationError

from cbistage.constants import ContextKind
from cbistage.datacls import (
    ConfigMapContext,
    GitContext,
    HTTPContext,
    RcloneContext,
    configmap_context,
    git_context,
    http_context,
    parse_context,
    rclone_context,
)
from cbistage.datacls.job import load_context
from cbistage.exceptions import ContextDefinitionError, UnsupportedContextKind

# A Git context as serialized by the CRD: unused blocks carry zero values
CRD_GIT_CONTEXT = {
    "kind": "Git",
    "git": {
        "url": "git@github.com:example/app.git",
        "revision": "v1.2.0",
        "subPath": "services/api",
        "sshSecretRef": {"name": "deploy-key"},
    },
    "configMapRef": {"name": ""},
    "http": {"url": "", "subPath": ""},
    "rclone": {"Remote": "", "Path": "", "secretRef": {"name": ""}, "sshSecretRef": {"name": ""}},
}


class TestSmartConstructors:
    """Tests for the per-kind constructors."""

    def test_git_defaults(self):
        ctx = git_context("https://github.com/example/app.git")
        assert isinstance(ctx, GitContext)
        assert ctx.kind is ContextKind.GIT
        assert ctx.revision is None
        assert ctx.sub_path is None
        assert ctx.ssh_secret_ref is None
        assert ctx.label == "context.git"

    def test_git_empty_optionals_mean_absent(self):
        ctx = git_context("https://github.com/example/app.git", revision="", sub_path="", ssh_secret="")
        assert ctx.revision is None
        assert ctx.sub_path is None
        assert ctx.ssh_secret_ref is None

    def test_git_with_ssh_secret(self):
        ctx = git_context("git@github.com:example/app.git", revision="main", ssh_secret="deploy-key")
        assert ctx.ssh_secret_ref.name == "deploy-key"
        assert ctx.revision == "main"

    @pytest.mark.parametrize("factory", [
        lambda: git_context("https://h/r.git", sub_path="/etc"),
        lambda: http_context("https://h/a.tar.gz", sub_path="/abs/dir"),
    ])
    def test_absolute_sub_path_is_rejected(self, factory):
        with pytest.raises(ContextDefinitionError, match="subPath must be relative"):
            factory()

    @pytest.mark.parametrize("factory, field", [
        (lambda: git_context(""), "url"),
        (lambda: http_context(""), "url"),
        (lambda: configmap_context(""), "configMapRef.name"),
        (lambda: rclone_context("", "p", "conf"), "remote"),
        (lambda: rclone_context("r", "", "conf"), "path"),
        (lambda: rclone_context("r", "p", ""), "secretRef.name"),
    ])
    def test_required_fields(self, factory, field):
        with pytest.raises(ContextDefinitionError, match=field):
            factory()

    def test_configmap(self):
        ctx = configmap_context("app-sources")
        assert isinstance(ctx, ConfigMapContext)
        assert ctx.config_map_ref.name == "app-sources"
        assert ctx.label == "context.configmap"

    def test_http(self):
        ctx = http_context("https://example.com/app.tar.gz", sub_path="app")
        assert isinstance(ctx, HTTPContext)
        assert ctx.sub_path == "app"

    def test_rclone(self):
        ctx = rclone_context("s3remote", "bucket/app", "rclone-conf", ssh_secret="sftp-key")
        assert isinstance(ctx, RcloneContext)
        assert ctx.location == "s3remote:bucket/app"
        assert ctx.secret_ref.name == "rclone-conf"
        assert ctx.ssh_secret_ref.name == "sftp-key"


class TestDescriptorInvariants:
    """A descriptor only ever holds the fields of its own kind."""

    def test_descriptors_are_frozen(self):
        ctx = git_context("https://github.com/example/app.git")
        with pytest.raises(ValidationError):
            ctx.url = "https://evil.example.com/app.git"

    def test_foreign_field_is_rejected(self):
        with pytest.raises(ValidationError):
            GitContext(url="https://h/r.git", remote="s3")

    def test_kind_mismatch_is_rejected(self):
        with pytest.raises(ContextDefinitionError, match="only accepts kind 'Git'"):
            GitContext(kind="HTTP", url="https://h/r.git")


class TestParseContext:
    """Tests for parsing the manifest form of a context."""

    def test_crd_shape_with_zero_value_blocks(self):
        ctx = parse_context(CRD_GIT_CONTEXT)
        assert ctx == git_context(
            "git@github.com:example/app.git",
            revision="v1.2.0",
            sub_path="services/api",
            ssh_secret="deploy-key",
        )

    def test_flat_shape(self):
        ctx = parse_context({"kind": "HTTP", "url": "https://example.com/a.tar", "subPath": "src"})
        assert ctx == http_context("https://example.com/a.tar", sub_path="src")

    def test_configmap_shape(self):
        ctx = parse_context({"kind": "ConfigMap", "configMapRef": {"name": "sources"}})
        assert ctx == configmap_context("sources")

    def test_rclone_go_style_keys(self):
        ctx = parse_context({
            "kind": "Rclone",
            "rclone": {"Remote": "gdrive", "Path": "builds/app", "secretRef": {"name": "conf"}},
        })
        assert ctx.location == "gdrive:builds/app"
        assert ctx.ssh_secret_ref is None

    def test_descriptor_passes_through(self):
        ctx = git_context("https://h/r.git")
        assert parse_context(ctx) is ctx

    def test_foreign_block_is_rejected(self):
        raw = {
            "kind": "Git",
            "git": {"url": "https://h/r.git"},
            "http": {"url": "https://example.com/a.tar"},
        }
        with pytest.raises(ContextDefinitionError, match="must not carry a 'http' block"):
            parse_context(raw)

    def test_field_given_twice_is_rejected(self):
        raw = {"kind": "Git", "url": "https://a/r.git", "git": {"url": "https://b/r.git"}}
        with pytest.raises(ContextDefinitionError, match="both inside and outside"):
            parse_context(raw)

    def test_unknown_field_is_rejected(self):
        with pytest.raises(ContextDefinitionError):
            parse_context({"kind": "HTTP", "http": {"url": "https://e/a.tar", "sha256": "abc"}})

    @pytest.mark.parametrize("kind", ["Svn", None, ""])
    def test_unknown_kind(self, kind):
        with pytest.raises(UnsupportedContextKind) as exc_info:
            parse_context({"kind": kind, "url": "x"})
        assert exc_info.value.kind == kind

    def test_not_a_mapping(self):
        with pytest.raises(ContextDefinitionError):
            parse_context(["Git"])

    @pytest.mark.parametrize("ctx", [
        git_context("https://h/r.git", revision="main", sub_path="a/b", ssh_secret="key"),
        configmap_context("sources"),
        http_context("https://example.com/a.tar.gz"),
        rclone_context("r", "p", "conf", ssh_secret="key"),
    ])
    def test_manifest_form_parses_back(self, ctx):
        manifest = ctx.to_manifest()
        assert manifest["kind"] == ctx.kind.value
        assert parse_context(manifest) == ctx


class TestLoadContext:
    """Tests for extracting the context from a BuildJob manifest."""

    def test_from_build_job(self):
        job = {
            "apiVersion": "cbi.containerbuilding.github.io/v1alpha1",
            "kind": "BuildJob",
            "metadata": {"name": "ex-git"},
            "spec": {
                "registry": {"target": "example.com/app:latest", "push": True},
                "language": {"kind": "Dockerfile"},
                "context": CRD_GIT_CONTEXT,
            },
        }
        ctx = load_context(job)
        assert isinstance(ctx, GitContext)
        assert ctx.sub_path == "services/api"

    def test_bare_context(self):
        ctx = load_context({"kind": "ConfigMap", "configMapRef": {"name": "sources"}})
        assert ctx == configmap_context("sources")

    def test_job_without_context(self):
        with pytest.raises(ContextDefinitionError, match="Invalid BuildJob manifest"):
            load_context({"kind": "BuildJob", "spec": {"language": {"kind": "Dockerfile"}}})

    def test_job_with_unsupported_context(self):
        with pytest.raises(UnsupportedContextKind):
            load_context({"kind": "BuildJob", "spec": {"context": {"kind": "Svn"}}})
