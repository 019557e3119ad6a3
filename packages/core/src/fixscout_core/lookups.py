"""Static lookup tables: SDK identifier -> repository, repository -> maintainers.

Both tables are read-only mappings built once at import. Teams that need
extra aliases pass them through config; ``with_extra_*`` returns a new
read-only table rather than mutating the built-in one.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType

SDK_REPOSITORIES: Mapping[str, str] = MappingProxyType(
    {
        "sentry-cocoa": "getsentry/sentry-cocoa",
        "cocoa": "getsentry/sentry-cocoa",
        "ios": "getsentry/sentry-cocoa",
        "macos": "getsentry/sentry-cocoa",
        "apple": "getsentry/sentry-cocoa",
        "sentry-java": "getsentry/sentry-java",
        "java": "getsentry/sentry-java",
        "android": "getsentry/sentry-java",
        "sentry-android": "getsentry/sentry-java",
        "sentry-python": "getsentry/sentry-python",
        "python": "getsentry/sentry-python",
        "sentry-sdk": "getsentry/sentry-python",
        "sentry-javascript": "getsentry/sentry-javascript",
        "javascript": "getsentry/sentry-javascript",
        "sentry-dotnet": "getsentry/sentry-dotnet",
        ".net": "getsentry/sentry-dotnet",
        "dotnet": "getsentry/sentry-dotnet",
        "sentry-ruby": "getsentry/sentry-ruby",
        "ruby": "getsentry/sentry-ruby",
        "sentry-php": "getsentry/sentry-php",
        "php": "getsentry/sentry-php",
        "sentry-go": "getsentry/sentry-go",
        "go": "getsentry/sentry-go",
        "sentry-rust": "getsentry/sentry-rust",
        "rust": "getsentry/sentry-rust",
        "sentry-react-native": "getsentry/sentry-react-native",
        "react-native": "getsentry/sentry-react-native",
        "sentry-dart": "getsentry/sentry-dart",
        "flutter": "getsentry/sentry-dart",
        "dart": "getsentry/sentry-dart",
        "sentry-capacitor": "getsentry/sentry-capacitor",
        "sentry-electron": "getsentry/sentry-electron",
        "electron": "getsentry/sentry-electron",
        "sentry-lynx": "getsentry/sentry-lynx",
        "sentry-elixir": "getsentry/sentry-elixir",
        "elixir": "getsentry/sentry-elixir",
        "sentry-unity": "getsentry/sentry-unity",
        "unity": "getsentry/sentry-unity",
        "sentry-unreal": "getsentry/sentry-unreal",
        "unreal": "getsentry/sentry-unreal",
        "sentry-native": "getsentry/sentry-native",
        "native": "getsentry/sentry-native",
        "sentry-kotlin-multiplatform": "getsentry/sentry-kotlin-multiplatform",
        "kmp": "getsentry/sentry-kotlin-multiplatform",
    }
)

# A repo may have several groups (sentry-java ships both Android and Java).
REPO_MAINTAINERS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "getsentry/sentry-java": ("@android-sdk-maintainers", "@java-sdk-maintainers"),
        "getsentry/sentry-cocoa": ("@apple-sdk-maintainers",),
        "getsentry/sentry-dart": ("@flutter-sdk-maintainers",),
        "getsentry/sentry-electron": ("@electron-sdk-maintainers",),
        "getsentry/sentry-elixir": ("@elixir-sdk-maintainers",),
        "getsentry/sentry-go": ("@go-sdk-maintainers",),
        "getsentry/sentry-javascript": ("@javascript-sdk-maintainers",),
        "getsentry/sentry-kotlin-multiplatform": ("@kmp-sdk-maintainers",),
        "getsentry/sentry-native": ("@native-sdk-maintainers",),
        "getsentry/sentry-dotnet": ("@dotnet-sdk-maintainers",),
        "getsentry/sentry-php": ("@php-sdk-maintainers",),
        "getsentry/sentry-python": ("@python-sdk-maintainers",),
        "getsentry/sentry-react-native": ("@react-native-sdk-maintainers",),
        "getsentry/sentry-ruby": ("@ruby-sdk-maintainers",),
        "getsentry/sentry-rust": ("@rust-sdk-maintainers",),
        "getsentry/sentry-unity": ("@unity-sdk-maintainers",),
        "getsentry/sentry-unreal": ("@unreal-sdk-maintainers",),
    }
)


def with_extra_repositories(extra: Mapping[str, str] | None) -> Mapping[str, str]:
    if not extra:
        return SDK_REPOSITORIES
    merged = dict(SDK_REPOSITORIES)
    merged.update({k.strip().lower(): v.strip() for k, v in extra.items()})
    return MappingProxyType(merged)


def with_extra_maintainers(extra: Mapping[str, list[str]] | None) -> Mapping[str, tuple[str, ...]]:
    if not extra:
        return REPO_MAINTAINERS
    merged = dict(REPO_MAINTAINERS)
    merged.update({k.strip(): tuple(v) for k, v in extra.items()})
    return MappingProxyType(merged)


def lookup_sdk_repository(sdk: str, table: Mapping[str, str] = SDK_REPOSITORIES) -> str | None:
    """Case-insensitive lookup of an SDK name or alias."""
    return table.get(sdk.strip().lower())


def maintainer_mention(repo: str | None, table: Mapping[str, tuple[str, ...]] = REPO_MAINTAINERS) -> str | None:
    """Space-joined maintainer group handles for ``repo``, or None when unknown.

    >>> maintainer_mention("getsentry/sentry-java")
    '@android-sdk-maintainers @java-sdk-maintainers'
    """
    if not repo:
        return None
    groups = table.get(repo)
    if not groups:
        return None
    return " ".join(groups)
