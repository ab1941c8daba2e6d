import numpy as np
import pytest

from id3py import (
    CategoricalAttribute,
    ContractViolationError,
    Dataset,
    DecisionTreeNode,
    GainRatioRuleGenerator,
    ID3DecisionTree,
    InformationGainRuleGenerator,
    NodeType,
    RuleGenerator,
    induce_id3_tree,
)

TENNIS = [
    ["sunny", "hot", "high", "weak", "no"],
    ["sunny", "hot", "high", "strong", "no"],
    ["overcast", "hot", "high", "weak", "yes"],
    ["rain", "mild", "high", "weak", "yes"],
    ["rain", "cool", "normal", "weak", "yes"],
    ["rain", "cool", "normal", "strong", "no"],
    ["overcast", "cool", "normal", "strong", "yes"],
    ["sunny", "mild", "high", "weak", "no"],
    ["sunny", "cool", "normal", "weak", "yes"],
    ["rain", "mild", "normal", "weak", "yes"],
    ["sunny", "mild", "normal", "strong", "yes"],
    ["overcast", "mild", "high", "strong", "yes"],
    ["overcast", "hot", "normal", "weak", "yes"],
    ["rain", "mild", "high", "strong", "no"],
]


def _tennis():
    """Quinlan's play-tennis data as a Dataset."""
    X = [row[:4] for row in TENNIS]
    y = [row[4] for row in TENNIS]
    return Dataset.from_arrays(X, y, feature_names=["outlook", "temp", "humidity", "wind"],
                               class_name="play")


def _scenario_a():
    return Dataset.from_arrays([["x"], ["x"], ["y"], ["y"]], [0, 0, 1, 1], feature_names=["A"])


class _NeverCalled(RuleGenerator):
    def generate_split_attribute(self, dataset):
        raise AssertionError("rule generator must not be consulted")


class _Fixed(RuleGenerator):
    def __init__(self, attribute):
        self.attribute = attribute

    def generate_split_attribute(self, dataset):
        return self.attribute


def _check_node(node, data):
    # histogram covers exactly the rows reaching the node
    assert sum(node.class_dist.values()) == data.rows
    assert node.class_dist == data.count_class_values()
    if node.children is not None:
        groups = data.decompose_on_attribute_values(node.split_attr)
        assert set(groups) == set(node.children)
        for k, child in node.children.items():
            _check_node(child, groups[k])


def test_scenario_a_rule_with_two_leaves():
    data = _scenario_a()
    root = induce_id3_tree(data, InformationGainRuleGenerator())
    assert root.node_type is NodeType.RULE
    assert root.split_attr is data.attributes[0]
    assert set(root.children) == {"x", "y"}
    assert root.children["x"].node_type is NodeType.LEAF
    assert root.children["x"].class_value == "0"
    assert root.children["y"].class_value == "1"

    held_out = Dataset.from_arrays([["x"]], attributes=data.non_class_attributes(),
                                   class_attribute=data.class_attribute)
    assert list(root.predict(held_out)) == ["0"]


def test_scenario_a_through_estimator():
    X = np.array([["x"], ["x"], ["y"], ["y"]], dtype=object)
    y = np.array([0, 0, 1, 1])
    clf = ID3DecisionTree().fit(X, y)
    assert list(clf.predict([["x"]])) == ["0"]
    assert clf.score(X, y) == 1.0
    assert list(clf.classes_) == ["0", "1"]


def test_scenario_b_single_row_is_leaf():
    data = Dataset.from_arrays([["a", "b"]], ["only"])
    for generator in (_NeverCalled(), InformationGainRuleGenerator(), GainRatioRuleGenerator()):
        root = induce_id3_tree(data, generator)
        assert root.node_type is NodeType.LEAF
        assert root.class_value == "only"
        assert root.class_dist == {"only": 1}
        assert root.children is None


def test_histograms_and_child_keys_match_partitions():
    data = _tennis()
    root = induce_id3_tree(data, InformationGainRuleGenerator())
    _check_node(root, data)


def test_tennis_tree_structure_and_rendering():
    root = induce_id3_tree(_tennis(), InformationGainRuleGenerator())
    expected = (
        "Rule(outlook)"
        "\n\tovercast\n\tLeaf(yes)"
        "\n\train\n\tRule(wind)"
        "\n\t\tstrong\n\t\tLeaf(no)"
        "\n\t\tweak\n\t\tLeaf(yes)"
        "\n\tsunny\n\tRule(humidity)"
        "\n\t\thigh\n\t\tLeaf(no)"
        "\n\t\tnormal\n\t\tLeaf(yes)"
    )
    assert str(root) == expected
    assert root.n_leaves() == 5
    assert root.depth() == 2


def test_induction_is_deterministic():
    data = _tennis()
    first = induce_id3_tree(data, InformationGainRuleGenerator())
    second = induce_id3_tree(data, InformationGainRuleGenerator())
    assert str(first) == str(second)


def test_majority_tie_breaks_lexicographically():
    # the only feature is constant, so no split is worth making
    data = Dataset.from_arrays([["c"], ["c"]], ["b", "a"])
    root = induce_id3_tree(data, InformationGainRuleGenerator())
    assert root.node_type is NodeType.RULE
    assert root.children is None
    assert root.split_attr is None
    assert root.class_value == "a"
    assert str(root) == "Leaf(a)"


def test_no_attributes_left_gives_majority_leaf():
    label = CategoricalAttribute("label")
    data = Dataset([label], [["q"], ["p"], ["q"]], class_attribute=label)
    root = induce_id3_tree(data, _NeverCalled())
    assert root.node_type is NodeType.LEAF
    assert root.class_value == "q"
    assert root.class_dist == {"q": 2, "p": 1}


def test_unseen_value_falls_back_to_node_majority():
    data = Dataset.from_arrays([["b"], ["b"], ["a"]], ["1", "1", "0"], feature_names=["A"])
    clf = ID3DecisionTree().fit(data)
    assert set(clf.root_.children) == {"a", "b"}
    # "c" and "0" were never seen at the root; both sort next to real branches
    assert list(clf.predict([["c"], ["0"], ["a"]])) == ["1", "1", "0"]


def test_attributes_resolve_by_identity_not_name():
    data = Dataset.from_arrays([["x"], ["x"], ["x"], ["y"]], ["0", "0", "0", "1"], feature_names=["A"])
    clf = ID3DecisionTree().fit(data)
    same = Dataset.from_arrays([["y"]], attributes=clf.attributes_, class_attribute=clf.class_attribute_)
    lookalike = Dataset.from_arrays([["y"]], feature_names=["A"])
    assert list(clf.predict(same)) == ["1"]
    # a different attribute object named "A" is not the split column
    assert list(clf.predict(lookalike)) == ["0"]


def test_predict_preserves_row_order():
    data = _tennis()
    clf = ID3DecisionTree().fit(data)
    pred = clf.predict(data)
    assert list(pred) == [row[4] for row in TENNIS]
    reversed_rows = data.take(np.arange(data.rows)[::-1])
    assert list(clf.predict(reversed_rows)) == [row[4] for row in TENNIS][::-1]


def test_generator_returning_foreign_attribute_fails_fast():
    data = _scenario_a()
    foreign = CategoricalAttribute("A")
    with pytest.raises(ContractViolationError) as info:
        induce_id3_tree(data, _Fixed(foreign))
    assert info.value.attribute_name == "A"
    with pytest.raises(ContractViolationError):
        induce_id3_tree(data, _Fixed(data.class_attribute))


def test_contract_violation_propagates_through_fit():
    data = _scenario_a()
    clf = ID3DecisionTree(rule_generator=_Fixed(CategoricalAttribute("ghost")))
    with pytest.raises(ValueError):
        clf.fit(data)


def test_empty_partition_is_rejected():
    data = _scenario_a().take([])
    with pytest.raises(ValueError):
        induce_id3_tree(data, InformationGainRuleGenerator())
    with pytest.raises(ValueError):
        ID3DecisionTree().fit(data)


def test_gain_ratio_generator_builds_valid_tree():
    data = _tennis()
    clf = ID3DecisionTree(rule_generator=GainRatioRuleGenerator()).fit(data)
    _check_node(clf.root_, data)
    assert clf.score(data) == 1.0


def test_not_fitted_raises():
    clf = ID3DecisionTree()
    with pytest.raises(ValueError):
        clf.predict([["x"]])
    with pytest.raises(ValueError):
        clf.export_rules()
    with pytest.raises(ValueError):
        clf.predict_rule([["x"]])


def test_estimator_params():
    clf = ID3DecisionTree(0.25, random_state=3)
    params = clf.get_params()
    assert params["prune_split"] == 0.25
    assert params["random_state"] == 3
    assert params["rule_generator"] is None


def test_estimator_string_wraps_tree_dump():
    clf = ID3DecisionTree().fit(_scenario_a())
    assert str(clf) == "ID3DecisionTree(Rule(A)\n\tx\n\tLeaf(0)\n\ty\n\tLeaf(1)\n)"


def test_export_and_trace_rules():
    data = _tennis()
    clf = ID3DecisionTree().fit(data)
    assert clf.export_rules() == [
        "outlook == overcast => yes",
        "outlook == rain AND wind == strong => no",
        "outlook == rain AND wind == weak => yes",
        "outlook == sunny AND humidity == high => no",
        "outlook == sunny AND humidity == normal => yes",
    ]
    rules = clf.predict_rule([["sunny", "hot", "high", "weak"], ["fog", "hot", "high", "weak"]])
    assert rules == ["outlook == sunny AND humidity == high", "<root>"]


def test_print_tree(capsys):
    clf = ID3DecisionTree().fit(_scenario_a())
    clf.print_tree()
    out = capsys.readouterr().out
    assert out.startswith("Rule(A)")
    assert "Leaf(1)" in out


def test_graphviz_source():
    pytest.importorskip("graphviz")
    clf = ID3DecisionTree().fit(_tennis())
    src = clf.export_graphviz()
    assert "outlook" in src
    assert "humidity" in src


def test_manual_node_behaves_like_leaf_without_children():
    label = CategoricalAttribute("label")
    a = CategoricalAttribute("A")
    node = DecisionTreeNode(NodeType.RULE, {"p": 3, "q": 1}, "p", label, split_attr=a)
    data = Dataset([a, label], [["z", "q"]], class_attribute=label)
    assert list(node.predict(data)) == ["p"]
    assert node.is_leaf


def test_empty_batch_predicts_nothing():
    data = Dataset.from_arrays([["x", "p"], ["y", "q"]], ["0", "1"], feature_names=["A", "B"])
    clf = ID3DecisionTree().fit(data)
    assert clf.predict([]).shape == (0,)
