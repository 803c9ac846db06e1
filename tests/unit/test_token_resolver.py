"""Tests for the token resolver: inheritance, fixed-point resolution, caching."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from tokensmith.core import resolver as resolver_module
from tokensmith.core.config import ResolverConfig, UnresolvedPolicy
from tokensmith.core.errors import (
    CircularInheritanceError,
    ReferenceNotFoundError,
    ReservedCategoryError,
    SourceNotFoundError,
    UnknownComputeFunctionError,
    UnresolvedTokenError,
)
from tokensmith.core.ir import STANDARD_CATEGORIES, Theme, TokenComputed, TokenSource, compute, ref
from tokensmith.core.resolver import (
    ResolutionCache,
    TokenResolver,
    merge_definitions,
    resolve_all_tokens,
)


def _source(source_id: str, extends: str | None = None, **tokens) -> TokenSource:
    return TokenSource(id=source_id, name=source_id.title(), extends=extends, tokens=tokens)


# =============================================================================
# Merging
# =============================================================================


class TestMergeDefinitions:
    """Leaf-level merge of token definitions."""

    def test_override_wins_per_key(self):
        merged = merge_definitions(
            {"colors": {"primary": "a", "background": "b"}},
            {"colors": {"primary": "c"}},
        )
        assert merged == {"colors": {"primary": "c", "background": "b"}}

    def test_new_categories_are_added(self):
        merged = merge_definitions({"colors": {"primary": "a"}}, {"sidebar": {"bg": "x"}})
        assert merged["sidebar"] == {"bg": "x"}
        assert merged["colors"] == {"primary": "a"}

    def test_inputs_are_not_mutated(self):
        base = {"colors": {"primary": "a"}}
        merge_definitions(base, {"colors": {"primary": "b"}})
        assert base == {"colors": {"primary": "a"}}


# =============================================================================
# Fixed-point reduction
# =============================================================================


class TestResolveAllTokens:
    """The two-stage literal + multi-pass reduction."""

    def test_literals_copied_and_numbers_stringified(self):
        resolved = resolve_all_tokens({"opacity": {"half": 0.5, "full": 1, "none": 0.0}})
        assert resolved["opacity"] == {"half": "0.5", "full": "1", "none": "0"}

    def test_standard_categories_always_present(self):
        resolved = resolve_all_tokens({})
        assert set(resolved) == set(STANDARD_CATEGORIES)
        assert all(values == {} for values in resolved.values())

    def test_unknown_categories_pass_through(self):
        resolved = resolve_all_tokens({"sidebar": {"bg": "0 0% 98%"}})
        assert resolved["sidebar"] == {"bg": "0 0% 98%"}

    def test_chained_references_any_order(self):
        resolved = resolve_all_tokens(
            {
                "colors": {
                    "a": ref("colors.b"),
                    "b": ref("colors.c"),
                    "c": "literal",
                }
            }
        )
        assert resolved["colors"] == {"a": "literal", "b": "literal", "c": "literal"}

    def test_inline_reference_across_categories(self):
        resolved = resolve_all_tokens(
            {
                "colors": {"primary": "221 83% 53%"},
                "shadows": {"focus": "0 0 0 2px hsl({colors.primary})"},
            }
        )
        assert resolved["shadows"]["focus"] == "0 0 0 2px hsl(221 83% 53%)"

    def test_missing_reference_raises_with_path(self):
        with pytest.raises(ReferenceNotFoundError, match="colors.doesNotExist"):
            resolve_all_tokens({"colors": {"bad": ref("colors.doesNotExist")}})

    def test_reference_to_category_is_rejected(self):
        with pytest.raises(ReferenceNotFoundError, match="Invalid token reference value"):
            resolve_all_tokens({"colors": {"primary": "x", "bad": ref("colors")}})

    def test_cycle_is_dropped_and_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="tokensmith.core.resolver"):
            resolved = resolve_all_tokens(
                {"colors": {"x": ref("colors.y"), "y": ref("colors.x"), "z": "ok"}}
            )
        assert resolved["colors"] == {"z": "ok"}
        assert "colors.x" in caplog.text
        assert "colors.y" in caplog.text

    def test_cycle_raises_under_error_policy(self):
        with pytest.raises(UnresolvedTokenError) as exc_info:
            resolve_all_tokens(
                {"colors": {"x": ref("colors.y"), "y": ref("colors.x")}},
                on_unresolved=UnresolvedPolicy.ERROR,
                source_id="loop",
            )
        assert exc_info.value.tokens == ["colors.x", "colors.y"]
        assert exc_info.value.source_id == "loop"

    def test_dependents_of_cycle_are_dropped_too(self):
        resolved = resolve_all_tokens(
            {"colors": {"x": ref("colors.y"), "y": ref("colors.x"), "w": ref("colors.x")}}
        )
        assert resolved["colors"] == {}

    def test_chain_longer_than_pass_budget_is_dropped(self):
        # Each pass resolves one more link when declared head-first.
        tokens = {"spacing": {f"t{i}": ref(f"spacing.t{i + 1}") for i in range(4)}}
        tokens["spacing"]["t4"] = "1px"

        resolved = resolve_all_tokens(tokens, max_passes=2)
        assert resolved["spacing"] == {"t4": "1px", "t3": "1px", "t2": "1px"}

        resolved = resolve_all_tokens(tokens, max_passes=10)
        assert len(resolved["spacing"]) == 5

    def test_undefined_path_behind_a_cycle_raises(self):
        # colors.x fails first on every pass; colors.nope is still checked.
        tokens = {
            "colors": {
                "x": ref("colors.y"),
                "y": ref("colors.x"),
                "pair": "{colors.x} {colors.nope}",
            }
        }
        with pytest.raises(ReferenceNotFoundError, match="colors.nope"):
            resolve_all_tokens(tokens)

    def test_undefined_compute_arg_behind_a_cycle_raises(self):
        tokens = {
            "spacing": {
                "x": ref("spacing.y"),
                "y": ref("spacing.x"),
                "gap": compute("add", "{spacing.x}", "{spacing.nope}"),
            }
        }
        with pytest.raises(ReferenceNotFoundError, match="spacing.nope"):
            resolve_all_tokens(tokens)

    def test_unknown_compute_function_fails_immediately(self):
        with pytest.raises(UnknownComputeFunctionError, match="Unknown compute function: blend"):
            resolve_all_tokens({"colors": {"bad": TokenComputed(fn="blend", args=[])}})


# =============================================================================
# Resolver
# =============================================================================


class TestResolver:
    """TokenResolver.resolve over registered sources."""

    def test_override_semantics(self, resolver):
        resolver.register(
            _source("base", colors={"primary": "221 83% 53%", "background": "0 0% 100%"})
        )
        resolver.register(_source("child", "base", colors={"primary": "142 76% 36%"}))

        theme = resolver.resolve_to_theme("child")
        assert theme.colors["primary"] == "142 76% 36%"
        assert theme.colors["background"] == "0 0% 100%"

    def test_computed_token(self, resolver, base_source):
        resolver.register(base_source)
        resolved = resolver.resolve("base")
        assert resolved["spacing"]["sm"] == "8px"
        assert resolved["spacing"]["md"] == "16px"
        assert resolved["colors"]["link"] == "221 83% 53%"

    def test_child_inherits_results_not_formulas(self, resolver, base_source):
        resolver.register(base_source)
        resolver.create_extension("base", "roomy", "Roomy", {"spacing": {"unit": "8px"}})

        resolved = resolver.resolve("roomy")
        assert resolved["spacing"]["unit"] == "8px"
        # sm was computed from the parent's unit before being inherited.
        assert resolved["spacing"]["sm"] == "8px"

    def test_child_can_reference_parent_tokens(self, resolver, base_source):
        resolver.register(base_source)
        ring = compute("opacity", "{colors.background}", 0.5)
        resolver.register(_source("child", "base", colors={"ring": ring}))
        assert resolver.resolve("child")["colors"]["ring"] == "#ffffff80"

    def test_deep_chain_resolves_root_first(self, resolver):
        resolver.register(_source("a", spacing={"unit": "2px"}))
        resolver.register(
            _source("b", "a", spacing={"sm": compute("scale", "{spacing.unit}", 2)})
        )
        resolver.register(
            _source("c", "b", spacing={"md": compute("add", "{spacing.sm}", "{spacing.sm}")})
        )

        assert resolver.resolve("c")["spacing"] == {"unit": "2px", "sm": "4px", "md": "8px"}
        assert "a" in resolver.cache and "b" in resolver.cache

    def test_unknown_source(self, resolver):
        with pytest.raises(SourceNotFoundError, match="Token source not found: nope"):
            resolver.resolve("nope")

    def test_dangling_parent(self, resolver):
        resolver.register(_source("orphan", "missing", colors={"a": "1"}))
        with pytest.raises(SourceNotFoundError, match="missing"):
            resolver.resolve("orphan")

    def test_unknown_reference_fails(self, resolver):
        resolver.register(_source("base", colors={"bad": ref("colors.doesNotExist")}))
        with pytest.raises(ReferenceNotFoundError) as exc_info:
            resolver.resolve("base")
        assert "colors.doesNotExist" in str(exc_info.value)
        assert "base" not in resolver.cache

    def test_cycle_terminates(self, resolver):
        resolver.register(_source("base", colors={"x": ref("colors.y"), "y": ref("colors.x")}))
        resolved = resolver.resolve("base")
        assert "x" not in resolved["colors"]
        assert "y" not in resolved["colors"]

    def test_strict_policy(self):
        strict = TokenResolver(ResolverConfig(on_unresolved=UnresolvedPolicy.ERROR))
        strict.register(_source("base", colors={"x": ref("colors.y"), "y": ref("colors.x")}))
        with pytest.raises(UnresolvedTokenError, match="in source base"):
            strict.resolve("base")

    def test_circular_inheritance(self, resolver):
        resolver.register(_source("a", "b"))
        resolver.register(_source("b", "a"))
        with pytest.raises(CircularInheritanceError):
            resolver.resolve("a")

    def test_resolvers_are_independent(self, base_source):
        first, second = TokenResolver(), TokenResolver()
        first.register(base_source)
        assert first.get_source("base") is not None
        assert second.get_source("base") is None


class TestResolverCache:
    """Memoization and transitive invalidation."""

    def test_idempotent_and_cached(self, resolver, base_source):
        resolver.register(base_source)
        with patch.object(
            resolver_module, "resolve_all_tokens", wraps=resolve_all_tokens
        ) as spy:
            first = resolver.resolve("base")
            second = resolver.resolve("base")

        assert first == second
        assert spy.call_count == 1

    def test_returned_tokens_are_copies(self, resolver, base_source):
        resolver.register(base_source)
        resolver.resolve("base")["colors"]["primary"] = "tampered"
        assert resolver.resolve("base")["colors"]["primary"] == "221 83% 53%"

    def test_reregistering_base_invalidates_descendants(self, resolver):
        resolver.register(
            _source("base", colors={"primary": "221 83% 53%", "background": "0 0% 100%"})
        )
        resolver.register(_source("child", "base", colors={"accent": ref("colors.primary")}))
        resolver.register(_source("grandchild", "child"))
        assert resolver.resolve("grandchild")["colors"]["accent"] == "221 83% 53%"

        resolver.register(_source("base", colors={"primary": "0 84% 60%"}))

        assert "child" not in resolver.cache
        assert "grandchild" not in resolver.cache
        resolved = resolver.resolve("grandchild")
        assert resolved["colors"]["primary"] == "0 84% 60%"
        assert resolved["colors"]["accent"] == "0 84% 60%"
        assert "background" not in resolved["colors"]

    def test_unregister_invalidates_descendants(self, resolver, base_source):
        resolver.register(base_source)
        resolver.create_extension("base", "child", "Child", {})
        resolver.resolve("child")

        resolver.unregister("base")

        assert "base" not in resolver.cache
        assert "child" not in resolver.cache
        with pytest.raises(SourceNotFoundError):
            resolver.resolve("child")

    def test_sibling_cache_survives(self, resolver, base_source):
        resolver.register(base_source)
        resolver.create_extension("base", "left", "Left", {})
        resolver.create_extension("base", "right", "Right", {})
        resolver.resolve("left")
        resolver.resolve("right")

        resolver.register(_source("left", "base", colors={"primary": "0 0% 0%"}))

        assert "right" in resolver.cache
        assert "base" in resolver.cache
        assert "left" not in resolver.cache

    def test_invalidation_terminates_on_cyclic_extends(self, resolver):
        resolver.register(_source("a", "b"))
        resolver.register(_source("b", "a"))
        visited = resolver.cache.invalidate("a", resolver.registry)
        assert visited == ["a", "b"]

    def test_cache_primitives(self):
        cache = ResolutionCache()
        cache.set("x", {"colors": {}})
        assert "x" in cache and len(cache) == 1
        cache.clear()
        assert cache.get("x") is None


# =============================================================================
# Extensions and themes
# =============================================================================


class TestExtensionsAndThemes:
    """create_extension and resolve_to_theme."""

    def test_create_extension_registers_child(self, resolver, base_source):
        resolver.register(base_source)
        child = resolver.create_extension(
            "base", "brand-a", "Brand A", {"colors": {"primary": "142 76% 36%"}}
        )
        assert child.extends == "base"
        assert resolver.get_source("brand-a") == child
        assert resolver.inherits_from("brand-a", "base")
        assert resolver.get_inheritance_chain("brand-a") == ["brand-a", "base"]

    def test_create_extension_requires_parent(self, resolver):
        with pytest.raises(SourceNotFoundError, match="Parent source not found: ghost"):
            resolver.create_extension("ghost", "child", "Child", {})
        assert resolver.get_source("child") is None

    def test_resolve_to_theme(self, resolver, base_source):
        resolver.register(base_source)
        resolver.create_extension(
            "base",
            "brand-a",
            "Brand A",
            {"borderRadius": {"md": "6px"}, "sidebar": {"bg": "{colors.background}"}},
        )

        theme = resolver.resolve_to_theme("brand-a")
        assert isinstance(theme, Theme)
        assert theme.id == "brand-a"
        assert theme.name == "Brand A"
        assert theme.border_radius == {"md": "6px"}
        assert theme.spacing["sm"] == "8px"
        assert theme.token_categories()["sidebar"] == {"bg": "0 0% 100%"}

    def test_resolve_to_theme_unknown(self, resolver):
        with pytest.raises(SourceNotFoundError):
            resolver.resolve_to_theme("nope")

    def test_register_all_and_listing(self, resolver):
        resolver.register_all([_source("a"), _source("b", "a")])
        assert [s.id for s in resolver.get_all_sources()] == ["a", "b"]

    def test_resolve_value_passthrough(self, resolver):
        assert resolver.resolve_value(ref("colors.a"), {"colors": {"a": "1px"}}) == "1px"

    @pytest.mark.parametrize("category", ["id", "name", "description"])
    def test_resolve_to_theme_rejects_reserved_category(self, resolver, category):
        resolver.register(_source("base", **{category: {"x": "1px"}}))

        assert resolver.resolve("base")[category] == {"x": "1px"}
        match = rf"reserved category name\(s\): {category}"
        with pytest.raises(ReservedCategoryError, match=match):
            resolver.resolve_to_theme("base")

    def test_resolve_to_theme_rejects_inherited_reserved_category(self, resolver):
        resolver.register(_source("base", name={"x": "1px"}))
        resolver.register(_source("child", "base", colors={"primary": "red"}))

        with pytest.raises(ReservedCategoryError) as exc_info:
            resolver.resolve_to_theme("child")
        assert exc_info.value.source_id == "child"
        assert exc_info.value.categories == ["name"]
