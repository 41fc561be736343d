import pytest

from mtl_catalog.core.exceptions import ValidationError
from mtl_catalog.core.interfaces import AssetKind
from mtl_catalog.core.target_material import TargetMaterial, TextureResource
from mtl_catalog.usd.local_store import LocalAssetStore
from mtl_catalog.usd.material_writer import read_material, write_material


class _Pipeline:
    def __init__(self):
        self.requests = []
        self.pending = set()

    def request_import(self, path, force_update=False):
        self.requests.append((path, force_update))

    def is_pending(self, path):
        return path in self.pending


def _touch(root, relative, content="data"):
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def test_find_asset_by_kind(tmp_path):
    """Ensure each asset kind is served from its file."""
    _touch(tmp_path, "Assets/Textures/hull.png")
    _touch(tmp_path, "Assets/Hull.xml", "<catalog/>")
    _touch(tmp_path, "Assets/Hull.fbx")
    store = LocalAssetStore(tmp_path)

    assert store.find_asset("Assets/Textures/hull.png", AssetKind.TEXTURE) == (
        TextureResource("Assets/Textures/hull.png")
    )
    assert store.find_asset("Assets/Hull.xml", AssetKind.TEXT) == "<catalog/>"
    assert store.find_asset("Assets/Hull.fbx", AssetKind.MODEL) == "Assets/Hull.fbx"


def test_find_asset_rejects_wrong_kind_and_missing_files(tmp_path):
    """Ensure lookups fail for wrong extensions, missing files and escapes."""
    _touch(tmp_path, "Assets/Hull.xml")
    store = LocalAssetStore(tmp_path)

    assert store.find_asset("Assets/Hull.xml", AssetKind.TEXTURE) is None
    assert store.find_asset("Assets/Deck.xml", AssetKind.TEXT) is None
    assert store.find_asset("../outside.png", AssetKind.TEXTURE) is None
    assert store.find_asset("", AssetKind.TEXT) is None


def test_pending_import_hides_texture(tmp_path):
    """Ensure a texture is not imported while its import is outstanding."""
    _touch(tmp_path, "Assets/Textures/hull.png")
    pipeline = _Pipeline()
    pipeline.pending.add("Assets/Textures/hull.png")
    store = LocalAssetStore(tmp_path, pipeline=pipeline)

    assert store.find_asset("Assets/Textures/hull.png", AssetKind.TEXTURE) is None

    pipeline.pending.clear()
    assert store.find_asset("Assets/Textures/hull.png", AssetKind.TEXTURE) is not None


def test_search_assets_is_case_insensitive(tmp_path):
    """Ensure filename searches ignore case and filter by kind."""
    _touch(tmp_path, "A/Textures/Hull.PNG")
    _touch(tmp_path, "B/hull.png")
    _touch(tmp_path, "C/hull.png.txt")
    store = LocalAssetStore(tmp_path)

    assert store.search_assets("hull.png", AssetKind.TEXTURE) == [
        "A/Textures/Hull.PNG",
        "B/hull.png",
    ]
    assert store.search_assets("hull.png", AssetKind.MODEL) == []


def test_create_asset_writes_and_caches_material(tmp_path):
    """Ensure created materials are written and returned by later lookups."""
    store = LocalAssetStore(tmp_path)
    material = TargetMaterial("Hull", shader="Standard")

    store.create_asset(material, "Assets/Materials/Hull.usda")

    assert (tmp_path / "Assets" / "Materials" / "Hull.usda").is_file()
    assert store.find_asset("assets/materials/hull.usda", AssetKind.MATERIAL) is material


def test_create_asset_rejects_non_materials(tmp_path):
    """Ensure only materials can be created."""
    store = LocalAssetStore(tmp_path)

    with pytest.raises(ValidationError):
        store.create_asset("text", "Assets/Notes.usda")


def test_material_loaded_from_disk_once(tmp_path):
    """Ensure materials on disk are read and then served from the cache."""
    write_material(
        TargetMaterial("Hull", shader="Standard"),
        tmp_path / "Assets" / "Materials" / "Hull.usda",
    )
    store = LocalAssetStore(tmp_path)

    first = store.find_asset("Assets/Materials/Hull.usda", AssetKind.MATERIAL)
    second = store.find_asset("Assets/Materials/Hull.usda", AssetKind.MATERIAL)

    assert first is second
    assert first.name == "Hull"
    assert first.shader == "Standard"
    assert store.search_assets("Hull.usda", AssetKind.MATERIAL) == [
        "Assets/Materials/Hull.usda"
    ]


def test_refresh_saves_dirty_materials(tmp_path):
    """Ensure refresh writes back materials changed after creation."""
    store = LocalAssetStore(tmp_path)
    material = TargetMaterial("Hull", shader="Standard")
    store.create_asset(material, "Assets/Materials/Hull.usda")

    material.set_texture("MainTex", TextureResource("Assets/Textures/hull.png"))
    assert material.dirty is True
    store.refresh()

    assert material.dirty is False
    loaded = read_material(tmp_path / "Assets" / "Materials" / "Hull.usda")
    assert loaded.get_texture("MainTex") == TextureResource("Assets/Textures/hull.png")


def test_folders(tmp_path):
    """Ensure folders are created under the project root."""
    store = LocalAssetStore(tmp_path)

    assert store.is_valid_folder("Assets/Textures") is False
    assert store.create_folder("Assets", "Textures") == "Assets/Textures"
    assert store.is_valid_folder("Assets/Textures") is True
    assert store.is_valid_folder("../elsewhere") is False


def test_import_asset_forwards_to_pipeline(tmp_path):
    """Ensure import requests reach the import subsystem."""
    pipeline = _Pipeline()
    store = LocalAssetStore(tmp_path, pipeline=pipeline)

    store.import_asset("Assets\\Textures\\hull.png", force_update=True)

    assert pipeline.requests == [("Assets/Textures/hull.png", True)]


def test_copy_file_stages_external_file(tmp_path):
    """Ensure external files are copied into the project."""
    external = _touch(tmp_path / "exports", "hull.png", "pixels")
    store = LocalAssetStore(tmp_path / "project")

    assert store.external_file_exists(str(external)) is True
    store.copy_file(str(external), "Assets/Textures/hull.png")

    staged = tmp_path / "project" / "Assets" / "Textures" / "hull.png"
    assert staged.read_text(encoding="utf-8") == "pixels"


def test_project_path_is_absolute(tmp_path):
    store = LocalAssetStore(tmp_path)
    expected = (tmp_path.resolve() / "Assets" / "Hull.fbx").as_posix()
    assert store.project_path("Assets/Hull.fbx") == expected


def test_labels_round_trip(tmp_path):
    """Ensure labels are stored per path, ignoring case."""
    store = LocalAssetStore(tmp_path)

    assert store.get_labels("Assets/Hull.xml") == []
    store.set_labels("Assets/Hull.xml", ["always-import"])

    assert store.get_labels("assets/HULL.xml") == ["always-import"]
    assert LocalAssetStore(tmp_path).get_labels("Assets/Hull.xml") == ["always-import"]


def test_unreadable_labels_file_is_ignored(tmp_path):
    """Ensure a corrupt labels file yields no labels."""
    store = LocalAssetStore(tmp_path)
    store.labels_file.write_text("{not json", encoding="utf-8")

    assert store.get_labels("Assets/Hull.xml") == []


def test_find_shader(tmp_path):
    store = LocalAssetStore(tmp_path, shaders=("Standard", "Unlit"))
    assert store.find_shader("Unlit") == "Unlit"
    assert store.find_shader("Missing") is None


def test_labels_file_without_object_is_ignored(tmp_path):
    """Ensure a labels file holding a list yields no labels and can be rewritten."""
    store = LocalAssetStore(tmp_path)
    store.labels_file.write_text("[]", encoding="utf-8")

    assert store.get_labels("Assets/Hull.xml") == []
    store.set_labels("Assets/Hull.xml", ["never-apply"])
    assert store.get_labels("Assets/Hull.xml") == ["never-apply"]
