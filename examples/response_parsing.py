"""
Shows how noisy model replies are turned into label arrays.

Runs offline; no endpoint is contacted.
"""

from sentence_categorizer import try_parse_label_array

REPLIES = [
    '["Animals", "Finance"]',
    'Sure! Here are the categories: ["Animals", "Finance",]',
    "['Animals', 'Finance']",
    "Result array: [“Animals”, “Finance”",
    "I could not decide.",
]


def main():
    for reply in REPLIES:
        result = try_parse_label_array(reply, expected_count=2)
        if result.ok:
            print(f"✅ {reply!r}\n   -> {result.labels} (via {result.strategy})")
        else:
            print(f"❌ {reply!r}\n   -> {result.reason}")


if __name__ == "__main__":
    main()
