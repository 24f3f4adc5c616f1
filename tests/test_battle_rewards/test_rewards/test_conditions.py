import pytest
from battle_rewards.battle.properties import snapshot
from battle_rewards.rewards.conditions import conditions_match, group_matches, matches

@pytest.fixture
def props(make):
    return snapshot(make.creature("Pikachu", level=45, types=("electric", "flying"), shiny=True))

@pytest.mark.parametrize("expression, expected", [
    ("type:electric", True),
    ("type=FLYING", True),
    ("type:elec", True),
    ("type:water", False),
    ("shiny:true", True),
    ("level=45", True),
    ("pikachu", True),
    ("PIKACHU", True),
    ("pika", False),
    ("raichu", False),
])
def test_single_expression(props, expression, expected):
    assert matches(expression, props) is expected

def test_unknown_key_falls_back_to_species(props):
    assert not matches("region:kanto", props)
    assert matches("mr:mime", {"species": "mr:mime"})

def test_first_separator_wins():
    props = {"species": "x", "form": "alola=true"}
    assert matches("form:alola=true", props)

def test_list_entry_is_and_group(props):
    assert group_matches(["type:electric", "shiny:true"], props)
    assert not group_matches(["type:electric", "shiny:false"], props)

def test_entries_are_or_ed(props):
    assert conditions_match(["charizard", ["type:electric", "level:45"]], props)
    assert not conditions_match(["charizard", ["type:electric", "level:12"]], props)

def test_blacklist_inverts(props):
    assert not conditions_match(["type:electric"], props, blacklist=True)
    assert conditions_match(["type:water"], props, blacklist=True)

@pytest.mark.parametrize("blacklist", [False, True])
def test_empty_conditions_always_apply(props, blacklist):
    assert conditions_match([], props, blacklist=blacklist)

def test_raw_tag_without_species():
    assert not matches("pikachu", {})
