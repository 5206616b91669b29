import pytest

from panel_mediation import ConfigurationError, ModelConfig, ModeratorSpec, PanelSpec
from panel_mediation.helpers.config import validate_model_list


def test_model_config_defaults():
    cfg = ModelConfig().validate()
    assert (cfg.panel_model, cfg.effect, cfg.robust_se, cfg.lag, cfg.moderator) == (
        "within", "individual", True, 0, None
    )


@pytest.mark.parametrize(
    "kwargs,field",
    [
        ({"panel_model": "bogus"}, "panel_model"),
        ({"effect": "nested"}, "effect"),
        ({"panel_model": "between", "effect": "twoways"}, "effect"),
        ({"lag": -1}, "lag"),
        ({"lag": 1.5}, "lag"),
        ({"lag": True}, "lag"),
    ],
)
def test_model_config_rejects(kwargs, field):
    with pytest.raises(ConfigurationError) as err:
        ModelConfig(**kwargs).validate()
    assert err.value.field == field
    assert field in str(err.value)


def test_configuration_error_is_value_error():
    with pytest.raises(ValueError):
        ModelConfig(panel_model="bogus").validate()


def test_replace_returns_new_validated_config():
    base = ModelConfig()
    new = base.replace(panel_model="random", robust_se=False)
    assert new.panel_model == "random" and new.robust_se is False
    assert base.panel_model == "within"
    with pytest.raises(ConfigurationError):
        base.replace(panel_model="between", effect="twoways")


def test_moderator_from_mapping_defaults_sites():
    spec = ModeratorSpec.from_mapping({"name": ["w"]})
    assert spec.names == ("w",)
    assert spec.sites == (("a", "c"),)
    assert spec.moderators_on("a") == ("w",)
    assert spec.moderators_on("b") == ()


def test_moderator_flat_sites_apply_to_every_name():
    spec = ModeratorSpec.from_mapping({"name": ["w", "z"], "site": ["b"]})
    assert spec.sites == (("b",), ("b",))


def test_moderator_bad_site():
    spec = ModeratorSpec(names=("w",), sites=(("d",),))
    with pytest.raises(ConfigurationError):
        spec.validate()


def test_moderator_passed_as_mapping_through_replace():
    cfg = ModelConfig().replace(moderator={"name": "w", "site": ["a"]})
    assert isinstance(cfg.moderator, ModeratorSpec)
    assert cfg.as_dict()["moderator"] == ["w"]


def test_panel_spec_validation():
    assert PanelSpec("id", "time").validate().balance is True
    with pytest.raises(ConfigurationError):
        PanelSpec("id", "id").validate()
    with pytest.raises(ConfigurationError):
        PanelSpec("", "time").validate()


@pytest.mark.parametrize("labels", [[], ["within", "bogus"], ["within", "within"]])
def test_validate_model_list_rejects(labels):
    with pytest.raises(ConfigurationError):
        validate_model_list(labels)


def test_validate_model_list_keeps_order():
    assert validate_model_list(["random", "pooling"]) == ("random", "pooling")
