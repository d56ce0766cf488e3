#!/usr/bin/env python3
"""
Example client for the Prompt Library API.

Signs up a user, creates a category and a prompt, reviews and uses the
prompt, then prints the resulting stats.
"""

import sys
import uuid

import requests


BASE_URL = "http://localhost:8000"


def signup(email: str, password: str, name: str) -> str:
    response = requests.post(
        f"{BASE_URL}/auth/signup",
        json={"email": email, "password": password, "name": name},
    )
    response.raise_for_status()
    data = response.json()
    print(f"✓ Signed up as {data['user']['email']}")
    return data["token"]


def create_category(headers: dict, name: str) -> dict:
    response = requests.post(f"{BASE_URL}/api/categories", json={"name": name}, headers=headers)
    if response.status_code == 409:
        print(f"  Category '{name}' already exists")
        return {}
    response.raise_for_status()
    category = response.json()["data"]
    print(f"✓ Created category: {category['name']}")
    return category


def create_prompt(headers: dict, category: str) -> dict:
    response = requests.post(
        f"{BASE_URL}/api/prompts",
        json={
            "title": "Quarterly budget review",
            "prompt": "Help me analyze the budget for next quarter: [budget summary]",
            "category": category,
            "tags": ["finance", "planning"],
            "difficulty": "medium",
        },
        headers=headers,
    )
    response.raise_for_status()
    prompt = response.json()["data"]
    print(f"✓ Created prompt: {prompt['id']}")
    print(f"  Summary: {prompt['summary']}")
    return prompt


def review_prompt(headers: dict, prompt_id: str, rating: int):
    response = requests.post(
        f"{BASE_URL}/api/prompts/{prompt_id}/review",
        json={"rating": rating, "toolUsed": "ChatGPT", "whatWorked": "Clear structure"},
        headers=headers,
    )
    response.raise_for_status()
    print(f"✓ Added {rating}-star review")


def use_prompt(prompt_id: str) -> int:
    response = requests.post(f"{BASE_URL}/api/prompts/{prompt_id}/use")
    response.raise_for_status()
    return response.json()["usageCount"]


def main():
    """Main function."""
    # Check if server is running
    try:
        response = requests.get(f"{BASE_URL}/health")
        response.raise_for_status()
    except requests.exceptions.ConnectionError:
        print("Error: Server is not running. Start it with: python -m prompt_library.main")
        sys.exit(1)

    print("Prompt Library API - Example Client")
    print("=" * 60)

    token = signup(f"demo-{uuid.uuid4().hex[:8]}@example.com", "demo-password", "Demo User")
    headers = {"Authorization": f"Bearer {token}"}

    create_category(headers, "Marketing")
    prompt = create_prompt(headers, "Marketing")

    review_prompt(headers, prompt["id"], 4)
    review_prompt(headers, prompt["id"], 2)
    print(f"✓ Usage count: {use_prompt(prompt['id'])}")

    detail = requests.get(f"{BASE_URL}/api/prompts/{prompt['id']}").json()["data"]
    print(f"\nRating: {detail['rating']} from {detail['reviewCount']} reviews")

    stats = requests.get(f"{BASE_URL}/api/stats").json()["data"]
    print("\nTotals:")
    for key, value in stats["totals"].items():
        print(f"  {key}: {value}")


if __name__ == "__main__":
    main()
