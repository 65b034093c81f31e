"""Rule-based narrative (analysis, suggestion, prescription) for an entry."""

from collections.abc import Sequence

from mediscan.classification.labels import ABNORMAL_LABELS
from mediscan.classification.models import ClassifiedParameter
from mediscan.classification.registry import ReferenceRangeRegistry
from mediscan.report.models import Interpretation

_MAX_EXAMPLES = 3

DIABETES_HBA1C = 6.5
PREDIABETES_HBA1C = 5.7
LDL_RISK_THRESHOLD = 100.0
TSH_UPPER = 4.0

NO_DATA = Interpretation(
    analysis="Analysis not available.",
    suggestion="Consult a healthcare professional for interpretation.",
    prescription="No specific prescription can be provided.",
)

ALL_NORMAL = Interpretation(
    analysis=(
        "All tested parameters are within normal reference ranges. "
        "This is a good health indicator."
    ),
    suggestion=(
        "Continue to maintain a healthy lifestyle, including a balanced diet and "
        "regular exercise. Regular health check-ups are recommended."
    ),
    prescription=(
        "No specific medication is needed based on these results. "
        "Continue with routine health monitoring."
    ),
)


class Interpreter:
    """Summarizes classified parameters into an Interpretation."""

    def __init__(self, registry: ReferenceRangeRegistry) -> None:
        self._registry = registry

    def interpret(self, parameters: Sequence[ClassifiedParameter]) -> Interpretation:
        if not parameters:
            return NO_DATA
        abnormal = [p for p in parameters if p.status_label in ABNORMAL_LABELS]
        if not abnormal:
            return ALL_NORMAL

        values = {
            self._registry.canonical_name(p.name) or p.name: p.result.numeric_value
            for p in parameters
        }
        analysis = self._findings_sentence(abnormal)
        suggestion = (
            "A comprehensive review by a qualified medical professional is highly "
            "recommended. Consider discussing these specific abnormal findings with "
            "your doctor."
        )
        prescription = (
            "No self-medication. Any prescription must come from a licensed doctor "
            "after a thorough examination."
        )

        hba1c = values.get("HbA1c")
        if hba1c is not None and hba1c >= DIABETES_HBA1C:
            analysis = (
                f"High HbA1c ({hba1c:g}%) strongly suggests Diabetes Mellitus type 2 "
                "(WHO criteria)."
            )
            suggestion = (
                "Immediate consultation with an endocrinologist or diabetologist is "
                "crucial. Implement rigorous dietary changes (low sugar, low carb), "
                "consistent exercise, and weight management. Regular self-monitoring "
                "of blood glucose is advised."
            )
            prescription = (
                "Medication, such as Metformin, or other glucose-lowering agents may "
                "be initiated by your doctor. Insulin therapy might be required "
                "depending on severity. Lifelong management and regular follow-ups "
                "are essential."
            )
        elif hba1c is not None and PREDIABETES_HBA1C <= hba1c < DIABETES_HBA1C:
            analysis = (
                f"Elevated HbA1c ({hba1c:g}%) indicates prediabetes (WHO criteria). "
                "This is a warning sign."
            )
            suggestion = (
                "Intensive lifestyle modifications are necessary to prevent "
                "progression to full-blown diabetes. Focus on a balanced diet, "
                "regular physical activity, and weight loss (if overweight/obese)."
            )
            prescription = (
                "No medication typically prescribed for prediabetes initially. "
                "Monitor HbA1c every 6-12 months. Discuss with your doctor if "
                "Metformin is appropriate for high-risk individuals."
            )

        ldl = values.get("LDL Cholesterol")
        hdl = values.get("HDL Cholesterol")
        if ldl is not None and ldl > LDL_RISK_THRESHOLD and self._below_min(
            "HDL Cholesterol", hdl
        ):
            analysis += (
                f" Elevated LDL Cholesterol ({ldl:g} mg/dL) and low HDL Cholesterol "
                f"({hdl:g} mg/dL) significantly increases cardiovascular risk."
            )
            suggestion += (
                " Focus on a low-saturated fat, low-trans fat, and low-cholesterol "
                "diet. Increase soluble fiber intake (oats, beans). Regular aerobic "
                "exercise is vital. Quit smoking if applicable."
            )
            prescription += (
                " Lipid-lowering medication (e.g., statins) may be prescribed by a "
                "cardiologist or primary care physician, especially if other risk "
                "factors are present."
            )

        tsh = values.get("TSH")
        if tsh is not None and tsh > TSH_UPPER and self._below_min(
            "Free T4", values.get("Free T4")
        ):
            analysis += (
                f" Elevated TSH ({tsh:g} μIU/mL) with low Free T4 suggests primary "
                "hypothyroidism."
            )
            suggestion += (
                " Monitor for symptoms like fatigue, weight gain, constipation, and "
                "cold intolerance."
            )
            prescription += (
                " Thyroid hormone replacement therapy (e.g., Levothyroxine) will "
                "likely be prescribed by an endocrinologist. Dosage adjustment based "
                "on TSH levels is crucial."
            )

        wbc = values.get("WBC Count")
        if wbc is not None and self._above_max("WBC Count", wbc):
            analysis += (
                f" High WBC Count ({wbc:g}) indicates a likely infection or "
                "inflammatory process."
            )
            suggestion += (
                " Seek medical attention for diagnosis and treatment. Rest and stay "
                "hydrated."
            )
            prescription += (
                " Antibiotics or anti-inflammatory drugs may be prescribed after "
                "further evaluation."
            )

        return Interpretation(analysis=analysis, suggestion=suggestion, prescription=prescription)

    @staticmethod
    def _findings_sentence(abnormal: Sequence[ClassifiedParameter]) -> str:
        examples = ", ".join(
            f"{p.name} ({p.status_label}: {p.display_value}{p.result.unit})"
            for p in abnormal[:_MAX_EXAMPLES]
        )
        return (
            f"Detected {len(abnormal)} parameters outside normal ranges. "
            f"Examples: {examples}. This indicates potential health deviations."
        )

    def _below_min(self, name: str, value: float | None) -> bool:
        definition = self._registry.lookup(name)
        if value is None or definition is None or definition.min is None:
            return False
        return value < definition.min

    def _above_max(self, name: str, value: float) -> bool:
        definition = self._registry.lookup(name)
        if definition is None or definition.max is None:
            return False
        return value > definition.max
