import pandas as pd
import numpy as np

# Generate expression data: 60 training + 30 test samples, 40 genes
np.random.seed(42)
n_genes = 40
genes = [f"gene{i}" for i in range(1, n_genes + 1)]


def make_table(n_samples, prefix):
    groups = np.array(["Health"] * (n_samples // 2) + ["Disease"] * (n_samples - n_samples // 2))
    expr = np.random.lognormal(mean=2.0, sigma=0.5, size=(n_samples, n_genes))
    # gene1 > gene2 in disease samples, reversed in healthy ones
    disease = groups == "Disease"
    expr[disease, 0] = expr[disease, 1] * 1.5
    expr[~disease, 0] = expr[~disease, 1] * 0.6
    # 加入少量标签噪声
    flip = np.random.rand(n_samples) < 0.05
    expr[flip, 0], expr[flip, 1] = expr[flip, 1], expr[flip, 0].copy()
    df = pd.DataFrame(expr.round(3), columns=genes,
                      index=[f"{prefix}{i}" for i in range(1, n_samples + 1)])
    df.index.name = "SampleID"
    df["Group"] = groups
    return df


make_table(60, "train").to_csv("test/expr_train.csv")
make_table(30, "test").to_csv("test/expr_test.csv")
