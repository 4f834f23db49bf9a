"""Latency benchmark for formfill.

Measures latency across the stages of a fill request:
- Extraction from a short contact sheet
- Extraction from a long site profile
- Signature building for a form (uncached)
- Full fill of a 20-field form

Usage:
    python -m benchmarks.latency
    python benchmarks/latency.py
"""

import json
import statistics
import time
from typing import Any, Dict, List

from formfill import FillConfig, FormFiller, SlotDescriptor
from formfill.extractor import extract_entities
from formfill.signature import build_signature

CONTACT_SHEET = (
    "Principal Investigator: Dr. Jane Smith\n"
    "Email: jane@hosp.org\n"
    "Phone: (555) 123-4567"
)

SITE_PROFILE = (
    "Site: Cityview Research Center\n"
    "Principal Investigator: Dr. Jane Smith, MD\n"
    "Sub-Investigator: Dr. Alan Grant\n"
    "Study Coordinator: Ellie Sattler\n"
    "Institution: Cityview Medical Center\n"
    "Department: Cardiology\n"
    "Address: 100 Main Street, Boston, MA 02115\n"
    "Phone: (555) 123-4567\n"
    "Fax: (555) 987-6543\n"
    "Email: research@cityview.org\n"
    "Website: https://cityview.org/research\n"
    "IRB Contact: Cityview Central IRB\n"
    "NPI: 1234567890\n"
    "DEA Number: AB1234563\n"
    "License Number: ML-123456\n"
    "Tax ID: 12-3456789\n"
    "Specialty: Interventional cardiology\n"
)

FORM = [
    SlotDescriptor(id="site_name", name="site_name", label="Site Name"),
    SlotDescriptor(id="pi_name", name="pi_name", label="Principal Investigator"),
    SlotDescriptor(id="sub_i", name="sub_i", label="Sub-Investigator"),
    SlotDescriptor(id="coord", name="coord", label="Study Coordinator"),
    SlotDescriptor(id="inst", name="institution", label="Institution"),
    SlotDescriptor(id="dept", name="dept", label="Department"),
    SlotDescriptor(id="street", name="address1", label="Street Address"),
    SlotDescriptor(id="city", name="city", label="City"),
    SlotDescriptor(id="state", name="state", label="State"),
    SlotDescriptor(id="zip", name="zipCode", label="ZIP"),
    SlotDescriptor(id="phone", name="phone", declared_type="tel", label="Phone"),
    SlotDescriptor(id="fax", name="fax", declared_type="tel", label="Fax"),
    SlotDescriptor(id="email", name="email", declared_type="email", label="Email"),
    SlotDescriptor(id="web", name="website", declared_type="url", label="Website"),
    SlotDescriptor(id="irb", name="irb", label="IRB Contact"),
    SlotDescriptor(id="npi", name="npi", declared_type="number", label="NPI"),
    SlotDescriptor(id="dea", name="dea", label="DEA Number"),
    SlotDescriptor(id="lic", name="license", label="Medical License"),
    SlotDescriptor(id="ein", name="ein", label="Tax ID"),
    SlotDescriptor(id="dob", name="dob", declared_type="date", label="Date of Birth"),
]


def _timed(fn, iterations: int = 1000) -> Dict[str, float]:
    """Run fn() `iterations` times and return latency stats in ms."""
    times: List[float] = []
    for _ in range(iterations):
        t0 = time.perf_counter()
        fn()
        elapsed = (time.perf_counter() - t0) * 1000
        times.append(elapsed)

    times.sort()
    return {
        "mean_ms": round(statistics.mean(times), 3),
        "median_ms": round(statistics.median(times), 3),
        "p95_ms": round(times[int(len(times) * 0.95)], 3),
        "p99_ms": round(times[int(len(times) * 0.99)], 3),
        "min_ms": round(times[0], 3),
        "max_ms": round(times[-1], 3),
        "iterations": iterations,
    }


def bench_extract_contact_sheet() -> Dict[str, float]:
    """Extraction on a three-line contact sheet."""
    return _timed(lambda: extract_entities(CONTACT_SHEET))


def bench_extract_site_profile() -> Dict[str, float]:
    """Extraction on a full site profile."""
    return _timed(lambda: extract_entities(SITE_PROFILE))


def bench_signatures() -> Dict[str, float]:
    """Uncached signature building for every field of the form."""
    return _timed(lambda: [build_signature(slot) for slot in FORM])


def bench_fill(cache_signatures: bool) -> Dict[str, float]:
    """Full fill of the 20-field form."""
    filler = FormFiller(FillConfig(cache_signatures=cache_signatures))
    return _timed(lambda: filler.fill(SITE_PROFILE, FORM), iterations=500)


def main():
    print("formfill Latency Benchmark")
    print("=" * 50)
    print()

    runs = [
        ("extract_contact_sheet", "extract_contact_sheet × 1000", bench_extract_contact_sheet),
        ("extract_site_profile", "extract_site_profile × 1000", bench_extract_site_profile),
        ("signatures_20_fields", "signatures (20 fields, uncached) × 1000", bench_signatures),
        ("fill_20_fields", "fill (20 fields) × 500", lambda: bench_fill(True)),
        ("fill_20_fields_uncached", "fill (20 fields, uncached signatures) × 500", lambda: bench_fill(False)),
    ]

    results: Dict[str, Any] = {}
    for key, label, bench in runs:
        print(f"Running: {label} ...")
        r = bench()
        results[key] = r
        print(f"  mean={r['mean_ms']:.3f}ms  p95={r['p95_ms']:.3f}ms  p99={r['p99_ms']:.3f}ms")

    report = FormFiller().fill(SITE_PROFILE, FORM)
    print()
    print("=" * 50)
    print(f"Fill result: {len(report.assignments)}/{len(FORM)} fields assigned, "
          f"overall confidence {report.overall_confidence:.2f}")
    print()
    for name, r in results.items():
        print(f"  {name:30s}  mean={r['mean_ms']:7.3f}ms  p95={r['p95_ms']:7.3f}ms")

    # Save results
    output_path = "benchmarks/latency_results.json"
    with open(output_path, "w") as f:
        json.dump(results, f, indent=2)
    print(f"\nResults saved to {output_path}")


if __name__ == "__main__":
    main()
