from pathlib import Path
import importlib
import sys
import traceback

root = Path(__file__).resolve().parents[1]
if str(root) not in sys.path:
    sys.path.insert(0, str(root))

MODULES = [
    "pagebuilder.config",
    "pagebuilder.core.errors",
    "pagebuilder.core.models",
    "pagebuilder.core.forms",
    "pagebuilder.core.images",
    "pagebuilder.core.lists",
    "pagebuilder.core.drafts",
    "pagebuilder.core.regeneration",
    "pagebuilder.core.registry",
    "pagebuilder.core.preview",
    "pagebuilder.core.session",
    "pagebuilder.core.storage",
    "pagebuilder.core.generator",
    "pagebuilder.ui.form_widgets",
    "pagebuilder.ui.list_editor",
    "pagebuilder.ui.media_picker",
    "pagebuilder.ui.section_editor",
    "pagebuilder.ui.main_window",
]


def try_import(name):
    print(f"Testing import: {name}")
    try:
        m = importlib.import_module(name)
        importlib.reload(m)
        print(f"{name} OK")
    except Exception:
        print(f"{name} ERR")
        traceback.print_exc()


if __name__ == '__main__':
    for module in MODULES:
        try_import(module)
