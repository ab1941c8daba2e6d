from time import perf_counter

from id3py import Dataset, ID3DecisionTree, RandomForest, enable_logging, get_confusion_matrix

rows = [
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
feats = ["outlook", "temp", "humidity", "wind"]

data = Dataset.from_arrays([r[:4] for r in rows], [r[4] for r in rows],
                           feature_names=feats, class_name="play")

with enable_logging(level="DEBUG"):
    t0 = perf_counter(); clf = ID3DecisionTree().fit(data); print(f"fit: {perf_counter()-t0:.3f} s")
clf.print_tree()
for rule in clf.export_rules():
    print(rule)

forest = RandomForest(forest_size=25, features=2, random_state=42).fit(data)
print(get_confusion_matrix(data, forest.predict(data)))
print(f"forest accuracy on training rows: {forest.score(data):.3f}")

try:
    clf.export_graphviz("tennis_tree", format="dot")
except RuntimeError as e:
    print(f"Skipping Graphviz export: {e}")
