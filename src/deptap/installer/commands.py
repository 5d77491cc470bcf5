"""Turn a package manager and a set of missing dependencies into a shell command."""

from __future__ import annotations

import shlex

from deptap.models import MissingDependencies, PackageManager

_SEPARATOR = " && "

# Manager → (runtime template, dev template). ``{names}`` is the
# space-joined, shell-quoted package list.
_COMMANDS: dict[PackageManager, tuple[str, str]] = {
    PackageManager.NPM: ("npm install {names}", "npm install -D {names}"),
    PackageManager.YARN: ("yarn add {names}", "yarn add -D {names}"),
    PackageManager.PNPM: ("pnpm add {names}", "pnpm add -D {names}"),
    PackageManager.BUN: ("bun add {names}", "bun add -d {names}"),
    PackageManager.BOWER: ("bower install {names} --save", "bower install {names} --save-dev"),
    PackageManager.VOLTA: ("volta run npm install {names}", "volta run npm install -D {names}"),
    PackageManager.JSPM: ("jspm install {names}", "jspm install --dev {names}"),
    PackageManager.IED: ("ied install {names}", "ied install --save-dev {names}"),
    PackageManager.CNPM: ("cnpm install {names}", "cnpm install -D {names}"),
    PackageManager.NTL: ("ntl install {names}", "ntl install -D {names}"),
    PackageManager.TNPM: ("tnpm install {names}", "tnpm install --save-dev {names}"),
    PackageManager.COREPACK: ("corepack npm install {names}", "corepack npm install -D {names}"),
}


def build_install_command(manager: PackageManager | str, missing: MissingDependencies) -> str:
    """Build the install command for ``missing``.

    Returns an empty string when there is nothing to install. Otherwise one
    sub-command for runtime dependencies and one for dev dependencies (each
    omitted when its list is empty), chained with ``&&`` so the second only
    runs if the first succeeds. Unknown managers use the npm entry.
    """
    if missing.is_empty:
        return ""

    runtime_template, dev_template = _COMMANDS.get(
        _coerce(manager), _COMMANDS[PackageManager.NPM]
    )
    parts: list[str] = []
    if missing.dependencies:
        parts.append(runtime_template.format(names=_join(missing.dependencies)))
    if missing.dev_dependencies:
        parts.append(dev_template.format(names=_join(missing.dev_dependencies)))
    return _SEPARATOR.join(parts)


def _coerce(manager: PackageManager | str) -> PackageManager | None:
    try:
        return PackageManager(manager)
    except ValueError:
        return None


def _join(names: dict[str, str]) -> str:
    return " ".join(shlex.quote(name) for name in names)
