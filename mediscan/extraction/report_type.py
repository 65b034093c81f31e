from collections.abc import Iterable

GENERAL_REPORT = "General Health Check"

# (label, filename keywords, characteristic parameters)
REPORT_TYPES: tuple[tuple[str, tuple[str, ...], frozenset[str]], ...] = (
    (
        "Complete Blood Count (CBC)",
        ("cbc", "blood count"),
        frozenset({"Hemoglobin", "WBC Count", "Platelet Count"}),
    ),
    (
        "Lipid Profile",
        ("lipid", "cholesterol"),
        frozenset({"Total Cholesterol", "LDL Cholesterol", "HDL Cholesterol", "Triglycerides"}),
    ),
    (
        "Diabetes Panel",
        ("diabetes", "glucose", "hba1c"),
        frozenset({"Fasting Glucose", "HbA1c"}),
    ),
    (
        "COVID-19 Test Report",
        ("covid",),
        frozenset({"COVID-19 Test"}),
    ),
    (
        "Thyroid Panel",
        ("thyroid", "tsh"),
        frozenset({"TSH", "Free T4"}),
    ),
    (
        "Kidney Function",
        ("kidney", "renal", "kft"),
        frozenset({"Creatinine", "eGFR"}),
    ),
    (
        "Urinalysis",
        ("urine", "urinalysis"),
        frozenset({"RBC in Urine", "Pus Cells in Urine", "Bacteria in Urine", "Protein in Urine"}),
    ),
)


def detect_report_type(file_name: str, parameter_names: Iterable[str]) -> str:
    """Label a report by file name keywords, then by which parameters it contains."""
    lowered = file_name.lower()
    for label, keywords, _names in REPORT_TYPES:
        if any(keyword in lowered for keyword in keywords):
            return label

    present = set(parameter_names)
    best_label = GENERAL_REPORT
    best_overlap = 0
    for label, _keywords, names in REPORT_TYPES:
        overlap = len(present & names)
        if overlap > best_overlap:
            best_label, best_overlap = label, overlap
    return best_label
