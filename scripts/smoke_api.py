#!/usr/bin/env python3
"""Post a comparison request to a running harness API and summarize it."""

import argparse
import json
import sys

import requests


def smoke(base_url: str, repo: str, commits: list, output: str) -> int:
    """Run one comparison through the API; return a process exit code."""
    payload = {"repo": repo, "commits": commits}

    print("🧪 Testing difftreecheck API...")
    print(f"Repository: {repo}")
    if commits:
        print(f"Pinned commits: {', '.join(c[:8] for c in commits)}")
    print()

    try:
        response = requests.post(f"{base_url}/compare", json=payload, timeout=600)
    except requests.exceptions.RequestException as e:
        print(f"❌ Request failed: {e}")
        return 1

    print(f"Status Code: {response.status_code}")
    if response.status_code != 200:
        print(f"❌ HTTP Error: {response.status_code}")
        print(response.text[:500])
        return 1

    result = response.json()
    with open(output, "w") as f:
        json.dump(result, f, indent=2)
    print(f"Response saved to {output}")

    if not result.get("ok"):
        error = result.get("error", {})
        print("❌ Error in response")
        print(f"Error Code: {error.get('code')}")
        print(f"Error Message: {error.get('message')}")
        return 1

    data = result["data"]
    for name, stats in sorted(data["backends"].items()):
        print(
            f"{name}: {stats['pairs']} pairs in {stats['diff_seconds']}s "
            f"({stats['pairs_per_second']} diffs/s)"
        )
    print(f"Checksum: {data['provenance']['checksum']}")

    if data["passed"]:
        print("✅ SUCCESS")
        return 0

    print(f"⚠️  FAIL: {data['reason']}")
    for divergence in data["divergences"]:
        print(f"  pair {divergence['git']['older'][:8]}..{divergence['git']['newer'][:8]}")
        for line in divergence["only_in_git"]:
            print(f"    only in git:     {line}")
        for line in divergence["only_in_dulwich"]:
            print(f"    only in dulwich: {line}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="Smoke test a running difftreecheck API")
    parser.add_argument("repo", help="Repository URL or absolute path")
    parser.add_argument("--commit", dest="commits", action="append", default=[])
    parser.add_argument("--url", default="http://127.0.0.1:8000")
    parser.add_argument("--output", default="api_response.json")
    args = parser.parse_args()
    return smoke(args.url, args.repo, args.commits, args.output)


if __name__ == "__main__":
    sys.exit(main())
