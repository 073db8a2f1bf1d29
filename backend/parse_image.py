#!/usr/bin/env python3
"""
Try the parsers on a photo.

Usage:
    python parse_image.py receipt /path/to/receipt.jpg
    python parse_image.py label /path/to/yogurt_lid.jpg

This will:
1. Run OCR on the image
2. Print the raw text (so you can see what you're working with)
3. Run the receipt parser or the expiry date parser
4. Print the results
"""

import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent))

from shelfscan.services.ocr import ocr_image
from shelfscan.services.expiry_parser import extract_expiry_date, score_candidates
from shelfscan.services.receipt_parser import parse_receipt_text, detect_store_type


def show_receipt(raw_text: str):
    store = detect_store_type(raw_text)
    print(f"\n[3] Detected store: {store}")

    print("\n[4] Running receipt parser...")
    result = parse_receipt_text(raw_text)

    print("\n[5] Parsed results:")
    print("-" * 40)
    print(f"Store: {result.store_name}")
    print(f"Date: {result.purchase_date}")
    print(f"Items: {len(result.line_items)}")

    for i, item in enumerate(result.line_items):
        print(f"  [{i+1}] {item.quantity} x {item.name} | £{item.price}")

    print(f"Total: £{result.total or '?.??'}")
    print("-" * 40)


def show_label(raw_text: str):
    print("\n[3] Date candidates:")
    for candidate in sorted(score_candidates(raw_text), key=lambda c: -c.score):
        print(f"  {candidate.to_date()} score={candidate.score:.0f}")

    result = extract_expiry_date(raw_text)
    print("\n[4] Expiry date:")
    print("-" * 40)
    print(result.value if result.ok else f"none ({result.error.value})")
    print("-" * 40)


def main():
    if len(sys.argv) < 3 or sys.argv[1] not in ("receipt", "label"):
        print("Usage: python parse_image.py receipt|label <image>")
        print("Example: python parse_image.py receipt ~/receipt.jpg")
        sys.exit(1)

    mode = sys.argv[1]
    image_path = Path(sys.argv[2]).expanduser()

    if not image_path.exists():
        print(f"File not found: {image_path}")
        sys.exit(1)

    print(f"Processing: {image_path}")
    print("=" * 60)

    # Run OCR
    print("\n[1] Running OCR...")
    raw_text = ocr_image(image_path.read_bytes())

    if not raw_text:
        print("OCR failed!")
        sys.exit(1)

    print("\n[2] Raw OCR text:")
    print("-" * 40)
    print(raw_text)
    print("-" * 40)

    if mode == "receipt":
        show_receipt(raw_text)
    else:
        show_label(raw_text)


if __name__ == "__main__":
    main()
