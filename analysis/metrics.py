
import pandas as pd
from typing import Dict

DRIVE_COLUMNS = ["drives_Energy", "drives_Hydra"]
EVENT_COLUMNS = ["drives_FoodRew", "drives_WaterRew", "drives_BumpPain"]

def calculate_drive_stats(ticks_df: pd.DataFrame) -> Dict[str, Dict[str, float]]:
    """Mean, min and final value of Energy and Hydra."""
    stats = {}
    for col in DRIVE_COLUMNS:
        if col not in ticks_df.columns or ticks_df[col].empty:
            continue
        stats[col.removeprefix("drives_")] = {
            "mean": float(ticks_df[col].mean()),
            "min": float(ticks_df[col].min()),
            "final": float(ticks_df[col].iloc[-1]),
        }
    return stats

def calculate_action_distribution(ticks_df: pd.DataFrame) -> pd.DataFrame:
    """Fraction of ticks spent on each action, per protocol."""
    if ticks_df.empty or "action_name" not in ticks_df.columns or "protocol_name" not in ticks_df.columns:
        return pd.DataFrame()

    counts = ticks_df.groupby("protocol_name")["action_name"].value_counts(normalize=True)
    return counts.unstack(fill_value=0.0)

def calculate_event_rates(ticks_df: pd.DataFrame) -> pd.DataFrame:
    """Per-tick rate of eating, drinking and bumping, per protocol."""
    cols = [c for c in EVENT_COLUMNS if c in ticks_df.columns]
    if ticks_df.empty or not cols or "protocol_name" not in ticks_df.columns:
        return pd.DataFrame()

    rates = (ticks_df[cols] > 0).groupby(ticks_df["protocol_name"]).mean()
    return rates.rename(columns={
        "drives_FoodRew": "eat_rate",
        "drives_WaterRew": "drink_rate",
        "drives_BumpPain": "bump_rate",
    })

def calculate_urgency_share(ticks_df: pd.DataFrame) -> Dict[str, float]:
    """How often the reflex proposal was urgent, and how often it was followed."""
    if ticks_df.empty or "urgency" not in ticks_df.columns:
        return {}

    urgent = ticks_df["urgency"] > 0
    followed = ticks_df["gen_action"] == ticks_df["action_name"]
    return {
        "urgent_share": float(urgent.mean()),
        "followed_share": float(followed.mean()),
    }

def calculate_score_distributions(episodes_df: pd.DataFrame) -> pd.DataFrame:
    """Calculates score distributions per protocol."""
    if 'score' not in episodes_df.columns or 'protocol' not in episodes_df.columns or episodes_df.empty:
        return pd.DataFrame()

    return episodes_df.groupby("protocol")["score"].describe()

def run_all_metrics(processed_dir: str) -> Dict:
    """
    Runs all metric calculations and returns a dictionary of results.
    """
    ticks_path = f"{processed_dir}/ticks.parquet"
    episodes_path = f"{processed_dir}/episodes.parquet"

    try:
        ticks_df = pd.read_parquet(ticks_path)
    except FileNotFoundError:
        ticks_df = pd.DataFrame()

    try:
        episodes_df = pd.read_parquet(episodes_path)
    except FileNotFoundError:
        episodes_df = pd.DataFrame()

    metrics = {
        "drive_stats": calculate_drive_stats(ticks_df),
        "action_distribution": calculate_action_distribution(ticks_df),
        "event_rates": calculate_event_rates(ticks_df),
        "urgency_share": calculate_urgency_share(ticks_df),
        "score_distributions": calculate_score_distributions(episodes_df).to_dict(),
    }

    return metrics
