
import argparse
import json
from pathlib import Path
import pandas as pd

def extract_data(runs_dir: Path, output_dir: Path):
    """
    Extracts runner output (summary.json + ticks.jsonl per run) into Parquet tables.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    # Clean up old files
    for f in output_dir.glob("*.parquet"):
        f.unlink()

    # Episodes
    episode_summaries = []
    for summary_file in sorted(runs_dir.glob("**/summary.json")):
        summary_data = json.loads(summary_file.read_text())
        summary_data["run_dir"] = summary_file.parent.name
        # nested config does not fit a flat table
        summary_data["protocol_config"] = json.dumps(summary_data.get("protocol_config", {}), sort_keys=True)
        episode_summaries.append(summary_data)

    if episode_summaries:
        episodes_df = pd.DataFrame(episode_summaries)
        episodes_df.to_parquet(output_dir / "episodes.parquet")
        print(f"Episodes table saved to {output_dir / 'episodes.parquet'}")
    else:
        pd.DataFrame().to_parquet(output_dir / "episodes.parquet")

    # Ticks
    all_ticks = []
    for tick_file in sorted(runs_dir.glob("**/ticks.jsonl")):
        with open(tick_file, "r") as f:
            for line in f:
                if not line.strip():
                    continue
                tick_data = json.loads(line)
                tick_data["run_dir"] = tick_file.parent.name
                all_ticks.append(tick_data)

    if all_ticks:
        # drives -> drives_Energy, drives_Hydra, ...
        ticks_df = pd.json_normalize(all_ticks, sep="_")
        for col in ("pos", "pos_i"):
            if col in ticks_df.columns:
                ticks_df[[f"{col}_x", f"{col}_y"]] = pd.DataFrame(ticks_df[col].tolist(), index=ticks_df.index)
                ticks_df = ticks_df.drop(columns=[col])
        ticks_df.to_parquet(output_dir / "ticks.parquet")
        print(f"Ticks table saved to {output_dir / 'ticks.parquet'}")
    else:
        pd.DataFrame().to_parquet(output_dir / "ticks.parquet")

def main():
    parser = argparse.ArgumentParser(description="Extract runner output into Parquet tables.")
    parser.add_argument("runs_dir", type=Path, help="Directory holding one sub-directory per run.")
    parser.add_argument("--output-dir", type=Path, default=Path("analysis/processed"), help="Directory to save the Parquet tables.")
    args = parser.parse_args()

    extract_data(args.runs_dir, args.output_dir)

if __name__ == "__main__":
    main()
