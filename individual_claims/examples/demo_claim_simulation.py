"""Demonstration of the individual claim development simulation."""

from datetime import date

from individual_claims import ClaimSimulator, ClosureModel, PaymentAmountModel, ZeroPaymentModel
from individual_claims import SimulationConfig, generate_claims, prepare_model_data
from individual_claims.convergence import check_convergence


def main():
    """Fit the three stages on synthetic claims and simulate one period ahead."""

    claims = generate_claims(claims_per_year=300, seed=42)
    data = prepare_model_data(claims, development_age=24, evaluation_date=date(2016, 12, 31))

    print("=" * 60)
    print("INDIVIDUAL CLAIM DEVELOPMENT SIMULATION")
    print("=" * 60)
    print()
    print(data.summary().round(3))
    print()

    closure = ClosureModel().fit(data.training)
    zero_payment = ZeroPaymentModel().fit(data.training)
    payment = PaymentAmountModel().fit(data.training)

    print("CLOSURE MODEL COEFFICIENTS:")
    print(closure.coefficients().round(4))
    print()
    print("PAYMENT MODEL FIT:")
    for key, value in payment.fit_statistics().items():
        print(f"  {key:<20} {value}")
    print()

    simulator = ClaimSimulator(
        closure, zero_payment, payment, SimulationConfig(n_sims=1000, seed=2024)
    )
    results = simulator.simulate(data.prediction)
    print(results.summary())
    print()

    print("LARGEST EXPECTED PAYMENTS:")
    summary = results.claim_summary().sort_values("expected_paid", ascending=False)
    print(summary.head(10)[["status", "prob_open_sim", "mean_paid", "p95_paid"]].round(2))
    print()

    print("BACK-TEST:")
    print(results.compare_with_actual(data.prediction).round(2))
    print()

    for stats in check_convergence(results).values():
        print(stats)


if __name__ == "__main__":
    main()
