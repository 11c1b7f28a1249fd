"""Seed a small demo experiment for a user."""
import argparse
import uuid
from datetime import datetime, timedelta, timezone

from crispr_studio.experiment import ExperimentRepository
from crispr_studio.guide import GuideRnaRepository
from crispr_studio.off_target import OffTargetSiteRepository
from crispr_studio.sequence import SequenceRepository

DEMO_SEQUENCES = [
    {
        "name": "EMX1 exon 3",
        "sequence": "GAGTCCGAGCAGAAGAAGAAGGGCTCCCATCACATCAACCGGTGGCGCATTGCCACGAAGCAGG",
        "guides": [
            {
                "guide_sequence": "GAGTCCGAGCAGAAGAAGAA",
                "pam_sequence": "GGG",
                "target_position": 0,
                "strand": "+",
                "efficiency_score": 0.9,
                "off_targets": [
                    {"sequence": "GAGTCTAAGCAGAAGAAGAA", "chromosome": "chr5", "position": 45359060, "mismatch_count": 2, "binding_score": 0.1},
                    {"sequence": "GAGTCCGAGCAGAAGAAGAG", "chromosome": "chr2", "position": 73160981, "mismatch_count": 1, "binding_score": 0.3},
                ],
            },
            {
                "guide_sequence": "CATCACATCAACCGGTGGCG",
                "pam_sequence": "CGG",
                "target_position": 28,
                "strand": "+",
                "efficiency_score": 0.4,
                "off_targets": [],
            },
        ],
    },
    {
        "name": "VEGFA promoter",
        "sequence": "GGTGAGTGAGTGTGTGCGTGTGGGGTTGAGGGCGTTGGAGCGGGGAGAAGGCCAGGGGTGG",
        "guides": [],
    },
]


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--user", type=uuid.UUID, required=True)
    args = parser.parse_args()

    experiments = ExperimentRepository()
    sequences = SequenceRepository()
    guides = GuideRnaRepository()
    off_targets = OffTargetSiteRepository()

    experiment = experiments.create(
        name="Demo knockout",
        created_by=args.user,
        target_organism="Homo sapiens",
    )
    print(f"Created experiment: {experiment['name']} (id={experiment['id']})")

    created_at = datetime.now(timezone.utc)
    for i, entry in enumerate(DEMO_SEQUENCES):
        sequence = sequences.create(
            experiment_id=experiment["id"],
            name=entry["name"],
            sequence=entry["sequence"],
            organism="Homo sapiens",
            created_at=created_at + timedelta(seconds=i),
        )
        for guide_entry in entry["guides"]:
            guide_entry = dict(guide_entry)
            sites = guide_entry.pop("off_targets")
            guide = guides.create(sequence_id=sequence["id"], **guide_entry)
            for site in sites:
                off_targets.create(guide_rna_id=guide["id"], **site)
        print(f"  Added sequence {sequence['name']} with {len(entry['guides'])} guide(s)")


if __name__ == "__main__":
    main()
