
import argparse
from pathlib import Path
import pandas as pd
import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt

from analysis.metrics import (
    DRIVE_COLUMNS,
    calculate_action_distribution,
    calculate_drive_stats,
    calculate_event_rates,
    calculate_score_distributions,
    calculate_urgency_share,
)

def generate_report(processed_dir: Path, report_dir: Path):
    """
    Generates a markdown report with plots from the processed data.
    """
    report_dir.mkdir(parents=True, exist_ok=True)

    ticks_path = processed_dir / "ticks.parquet"
    episodes_path = processed_dir / "episodes.parquet"

    ticks_df = pd.read_parquet(ticks_path) if ticks_path.exists() else pd.DataFrame()
    episodes_df = pd.read_parquet(episodes_path) if episodes_path.exists() else pd.DataFrame()

    report_parts = ["# Analysis Report\n"]

    # --- Metadata ---
    report_parts.append("## Run Metadata\n")
    metadata = {
        "Processed Directory": f"`{processed_dir}`",
        "Protocols": episodes_df["protocol"].nunique() if "protocol" in episodes_df.columns else 0,
        "Episodes": len(episodes_df),
        "Ticks": len(ticks_df),
    }
    report_parts.append(pd.DataFrame([metadata]).to_markdown(index=False))
    report_parts.append("\n")

    # --- Drives ---
    report_parts.append("## Energy and Hydration\n")
    drive_stats = calculate_drive_stats(ticks_df)
    if drive_stats:
        report_parts.append(pd.DataFrame(drive_stats).T.to_markdown())

        plt.figure()
        for run_dir, run_df in ticks_df.groupby("run_dir"):
            for col in DRIVE_COLUMNS:
                if col in run_df.columns:
                    plt.plot(run_df["tick"], run_df[col], label=f"{run_dir} {col.removeprefix('drives_')}")
        plt.title("Drives over Time")
        plt.xlabel("Tick")
        plt.ylabel("Level")
        plt.legend(fontsize="small")
        plt.savefig(report_dir / "drives.png")
        plt.close()
        report_parts.append("\n![Drives](drives.png)\n")
    else:
        report_parts.append("No drive data found.\n")

    # --- Actions ---
    report_parts.append("## Action Distribution\n")
    action_df = calculate_action_distribution(ticks_df)
    if not action_df.empty:
        report_parts.append(action_df.to_markdown())

        action_df.T.plot.bar()
        plt.title("Action Distribution by Protocol")
        plt.xlabel("Action")
        plt.ylabel("Fraction of Ticks")
        plt.savefig(report_dir / "actions.png")
        plt.close()
        report_parts.append("\n![Actions](actions.png)\n")
    else:
        report_parts.append("No action data found.\n")

    # --- Consumption / bumps ---
    report_parts.append("## Event Rates\n")
    rates_df = calculate_event_rates(ticks_df)
    if not rates_df.empty:
        report_parts.append(rates_df.to_markdown())
    else:
        report_parts.append("No event data found.")
    report_parts.append("\n")

    # --- Reflex sanity checks ---
    report_parts.append("### Reflex Checks\n")
    urgency = calculate_urgency_share(ticks_df)
    if urgency:
        report_parts.append(pd.DataFrame([urgency]).to_markdown(index=False))
    else:
        report_parts.append("Not enough data for reflex checks.")
    report_parts.append("\n")

    # --- Scores ---
    report_parts.append("## Protocol Score Distributions\n")
    score_dist = calculate_score_distributions(episodes_df)
    if not score_dist.empty:
        report_parts.append(score_dist.to_markdown())

        plt.figure()
        episodes_df.boxplot(column="score", by="protocol", grid=False)
        plt.title("Score Distribution by Protocol")
        plt.suptitle("") # remove default title
        plt.xlabel("Protocol")
        plt.ylabel("Score")
        plt.savefig(report_dir / "score_dist.png")
        plt.close()
        report_parts.append("\n![Score Distribution](score_dist.png)\n")
    else:
        report_parts.append("No score data found.\n")

    # --- Write Report ---
    report_path = report_dir / "report.md"
    report_path.write_text("\n".join(report_parts))
    print(f"Report saved to {report_path}")


def main():
    parser = argparse.ArgumentParser(description="Generate analysis report from processed data.")
    parser.add_argument("--processed-dir", type=Path, default=Path("analysis/processed"), help="Directory with Parquet tables.")
    parser.add_argument("--report-dir", type=Path, default=Path("analysis/report"), help="Directory to save the report and plots.")
    args = parser.parse_args()

    generate_report(args.processed_dir, args.report_dir)

if __name__ == "__main__":
    main()
