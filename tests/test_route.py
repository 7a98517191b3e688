"""Tests for perch.routing.route: handler references and path normalization."""

import pytest

from perch.errors import ConfigurationError
from perch.routing.route import (
    BoundHandler,
    DirectHandler,
    Route,
    normalize_path,
    to_handler_ref,
)


def show_user(request, id):
    return f"user {id}"


class UserController:
    def show(self, request, id):
        return f"user {id}"


class TestNormalizePath:
    @pytest.mark.parametrize("path", ["", "/", "/.", "//"])
    def test_root_forms(self, path: str) -> None:
        assert normalize_path(path) == "/"

    def test_adds_leading_slash(self) -> None:
        assert normalize_path("users") == "/users"

    def test_strips_trailing_slash(self) -> None:
        assert normalize_path("/users/{id}/") == "/users/{id}"


class TestToHandlerRef:
    def test_function(self) -> None:
        assert to_handler_ref(show_user) == DirectHandler(show_user)

    def test_lambda(self) -> None:
        func = lambda request: "ok"  # noqa: E731
        assert to_handler_ref(func) == DirectHandler(func)

    def test_class_method_pair(self) -> None:
        assert to_handler_ref((UserController, "show")) == BoundHandler(UserController, "show")

    def test_name_method_pair(self) -> None:
        assert to_handler_ref(("Users", "show")) == BoundHandler("Users", "show")

    def test_at_string(self) -> None:
        assert to_handler_ref("UserController@show") == BoundHandler("UserController", "show")

    def test_existing_ref_passes_through(self) -> None:
        ref = BoundHandler(UserController, "show")
        assert to_handler_ref(ref) is ref

    @pytest.mark.parametrize("action", ["UserController", "@show", "UserController@"])
    def test_malformed_string(self, action: str) -> None:
        with pytest.raises(ConfigurationError, match="Controller@method"):
            to_handler_ref(action)

    @pytest.mark.parametrize("action", [42, None, UserController, (UserController, 1), ()])
    def test_rejects_other_values(self, action: object) -> None:
        with pytest.raises(ConfigurationError, match="Invalid route action"):
            to_handler_ref(action)


class TestLabels:
    def test_direct_label(self) -> None:
        assert DirectHandler(show_user).label == "show_user"

    def test_bound_label_class(self) -> None:
        assert BoundHandler(UserController, "show").label == "UserController@show"

    def test_bound_label_name(self) -> None:
        assert BoundHandler("Users", "show").label == "Users@show"


class TestRoute:
    def test_matcher_compiled_from_path(self) -> None:
        route = Route(method="GET", path="/users/{id}", handler=DirectHandler(show_user))
        assert route.matcher.match("/users/3") == {"id": "3"}

    def test_frozen(self) -> None:
        route = Route(method="GET", path="/", handler=DirectHandler(show_user))
        with pytest.raises(AttributeError):
            route.path = "/other"  # type: ignore[misc]
