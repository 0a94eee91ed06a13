from __future__ import annotations

from modpack_installer.main import main as core_main


def main(argv: list[str] | None = None) -> int:
    # Thin launcher for running from a source checkout.
    return core_main(argv)


if __name__ == "__main__":
    raise SystemExit(main())
