"""
Testes do planejador e do resumo do CutPlanner
"""

import re
import unittest
from collections import Counter
from decimal import Decimal

from cutplanner import (
    CutPlan, CutPlanner, InsufficientStockError, InvalidInputError,
    OptimizationRequest, plan, summarize
)


class TestPlannerScenarios(unittest.TestCase):

    def test_fills_first_bar_before_opening_another(self):
        plans = plan([1000, 1000, 1000, 1000, 1000], [3000], 0)

        self.assertEqual(len(plans), 2)
        self.assertEqual(plans[0].cuts, (1000, 1000, 1000))
        self.assertEqual(plans[0].waste, 0)
        self.assertEqual(plans[1].cuts, (1000, 1000))
        self.assertEqual(plans[1].waste, 1000)

    def test_cut_longer_than_every_stock_length(self):
        with self.assertRaises(InsufficientStockError) as ctx:
            plan([2500], [2000], 0)

        self.assertEqual(ctx.exception.length, 2500)
        self.assertIn("2500", str(ctx.exception))

    def test_kerf_pushes_second_cut_to_new_bar(self):
        plans = plan([1000, 1000], [2000], 10)

        self.assertEqual(len(plans), 2)
        for p in plans:
            self.assertEqual(p.cuts, (1000,))
            self.assertEqual(p.kerf_loss, 0)
            self.assertEqual(p.waste, 1000)

    def test_kerf_charged_only_between_cuts(self):
        plans = plan([1000, 1000], [2010], 10)

        self.assertEqual(len(plans), 1)
        self.assertEqual(plans[0].used_length, 2000)
        self.assertEqual(plans[0].kerf_loss, 10)
        self.assertEqual(plans[0].waste, 0)

    def test_cuts_processed_longest_first(self):
        plans = plan([300, 600, 600], [1000], 0)

        self.assertEqual([p.cuts for p in plans], [(600, 300), (600,)])

    def test_open_bar_tie_goes_to_earliest(self):
        # as duas barras sobram 100 após o corte de 300
        plans = plan([600, 600, 300], [1000], 0)

        self.assertEqual(plans[0].cuts, (600, 300))
        self.assertEqual(plans[1].cuts, (600,))

    def test_open_bar_with_least_leftover_wins(self):
        plans = plan([1500, 800, 150], [2000, 1000], 0)

        self.assertEqual(plans[0].stock_length, 2000)
        self.assertEqual(plans[0].cuts, (1500,))
        self.assertEqual(plans[1].stock_length, 1000)
        self.assertEqual(plans[1].cuts, (800, 150))

    def test_new_bar_prefers_absorbing_pending_cuts(self):
        plans = plan([2000, 2000, 2000], [4000, 6100], 0)

        self.assertEqual(len(plans), 1)
        self.assertEqual(plans[0].stock_length, 6100)
        self.assertEqual(plans[0].waste, 100)

    def test_new_bar_waste_per_cut_breaks_ties(self):
        plans = plan([2000, 2000, 2000], [7000, 6000], 0)

        self.assertEqual(len(plans), 1)
        self.assertEqual(plans[0].stock_length, 6000)

    def test_stock_shorter_than_cut_plus_kerf_still_usable(self):
        plans = plan([1000], [1005], 10)

        self.assertEqual(plans[0].stock_length, 1005)
        self.assertEqual(plans[0].waste, 5)

    def test_new_bar_highest_score_among_stocks_without_repeat_fit(self):
        # nenhuma das barras comporta corte + kerf; a de menor sobra vence
        plans = plan([1000], [1008, 1005], 10)

        self.assertEqual(plans[0].stock_length, 1005)
        self.assertEqual(plans[0].waste, 5)

    def test_warns_when_waste_per_cut_exceeds_score_weight(self):
        with self.assertLogs('cutplanner.core', 'WARNING') as logs:
            plans = plan([100], [50000], 0)

        self.assertEqual(plans[0].waste, 49900)
        self.assertIn("50000", logs.output[0])

    def test_decimal_lengths_fill_bar_exactly(self):
        self.assertEqual([p.cuts for p in plan([0.2, 0.1], [0.3], 0)], [(0.2, 0.1)])

        plans = plan([333.3] * 3, [1000.1], 0.1)
        self.assertEqual(len(plans), 1)
        self.assertEqual(plans[0].kerf_loss, 0.2)
        self.assertEqual(plans[0].waste, 0)

    def test_decimal_lengths_conserve_stock_exactly(self):
        cases = (
            ([333.3] * 3, [1000.1], 0.1),
            ([0.7, 0.18], [1.0], 0.12),
            ([12.7, 45.3, 88.1, 0.9] * 5, [150.5, 100.3], 0.3),
        )
        for cuts, stocks, kerf in cases:
            for p in plan(cuts, stocks, kerf):
                with self.subTest(cuts=cuts, plan=p):
                    total = (Decimal(str(p.used_length)) + Decimal(str(p.kerf_loss))
                             + Decimal(str(p.waste)))
                    self.assertEqual(total, Decimal(str(p.stock_length)))
                    self.assertGreaterEqual(p.waste, 0)

    def test_duplicate_stock_lengths_are_ignored(self):
        self.assertEqual(plan([1000], [3000, 3000], 0), plan([1000], [3000], 0))

    def test_planner_default_kerf(self):
        planner = CutPlanner(kerf_width=10)

        self.assertEqual(len(planner.plan([1000, 1000], [2000])), 2)
        self.assertEqual(len(planner.plan([1000, 1000], [2000], kerf=0)), 1)

    def test_plans_are_immutable(self):
        plans = plan([1000], [3000], 0)

        with self.assertRaises(Exception):
            plans[0].waste = 0


class TestPlannerProperties(unittest.TestCase):

    cuts = [2400] * 4 + [1200] * 6 + [800] * 10 + [450] * 8 + [3100, 5900]
    stocks = [6000, 12100, 15100]

    def test_conservation_and_feasibility(self):
        for kerf in (0, 3, 10):
            for p in plan(self.cuts, self.stocks, kerf):
                self.assertGreaterEqual(p.waste, 0)
                self.assertEqual(p.used_length, sum(p.cuts))
                self.assertEqual(p.kerf_loss, (len(p.cuts) - 1) * kerf)
                self.assertEqual(p.stock_length, p.used_length + p.kerf_loss + p.waste)
                self.assertIn(p.stock_length, self.stocks)

    def test_completeness(self):
        plans = plan(self.cuts, self.stocks, 3)
        assigned = Counter(c for p in plans for c in p.cuts)

        self.assertEqual(assigned, Counter(self.cuts))

    def test_determinism(self):
        first = plan(self.cuts, self.stocks, 3)
        second = plan(list(reversed(self.cuts)), self.stocks, 3)

        self.assertEqual(first, plan(self.cuts, self.stocks, 3))
        self.assertEqual(first, second)

    def test_kerf_increase_never_reduces_bars_or_kerf_loss(self):
        for cuts, stocks in (([1000] * 6, [3000]), ([1500] * 4, [6000])):
            previous = None
            for kerf in (0, 1, 5, 10, 50):
                summary = summarize(plan(cuts, stocks, kerf), kerf)
                if previous is not None:
                    self.assertGreaterEqual(summary.total_stock_used, previous.total_stock_used)
                    self.assertGreaterEqual(summary.total_kerf_loss, previous.total_kerf_loss)
                previous = summary


class TestInputValidation(unittest.TestCase):

    def test_rejects_invalid_cuts(self):
        for cuts in ([], [0], [-5], ["abc"], [True], [float('nan')], [float('inf')], None):
            with self.subTest(cuts=cuts):
                with self.assertRaises(InvalidInputError):
                    plan(cuts, [6000], 0)

    def test_rejects_invalid_stock_lengths(self):
        for stocks in ([], [0], [-6000], ["6000"], None):
            with self.subTest(stocks=stocks):
                with self.assertRaises(InvalidInputError):
                    plan([1000], stocks, 0)

    def test_rejects_negative_kerf(self):
        with self.assertRaises(InvalidInputError):
            plan([1000], [6000], -1)

    def test_accepts_fractional_lengths(self):
        plans = plan([999.5, 0.5], [1000], 0)

        self.assertEqual(len(plans), 1)
        self.assertEqual(plans[0].waste, 0)


class TestSummary(unittest.TestCase):

    def test_aggregates_totals(self):
        plans = [
            CutPlan(stock_length=6000, cuts=(5500,), used_length=5500, kerf_loss=0, waste=500),
            CutPlan(stock_length=6000, cuts=(6000,), used_length=6000, kerf_loss=0, waste=0),
            CutPlan(stock_length=12000, cuts=(10800,), used_length=10800, kerf_loss=0, waste=1200),
        ]
        summary = summarize(plans, 0)

        self.assertEqual(summary.total_stock_used, 3)
        self.assertEqual(summary.total_length, 24000)
        self.assertEqual(summary.total_waste, 1700)
        self.assertEqual(summary.total_used, 22300)
        self.assertEqual(summary.efficiency, 92.92)
        self.assertEqual(
            [(u.length, u.count, u.total_waste) for u in summary.stock_usage],
            [(12000, 1, 1200), (6000, 2, 500)]
        )
        self.assertEqual(
            summary.summary,
            "Barras usadas: 3 | Comprimento total: 24000mm | Desperdício total: 1700mm | Eficiência: 92.92%"
        )
        self.assertEqual(
            summary.stock_usage_summary,
            "Uso de barras: 1x 12000mm (desperdício: 1200mm), 2x 6000mm (desperdício: 500mm)"
        )

    def test_stock_usage_sorted_numerically(self):
        plans = plan([8000, 11000], [9000, 12100], 0)
        summary = summarize(plans)

        self.assertEqual([u.length for u in summary.stock_usage], [12100, 9000])

    def test_kerf_loss_reported_when_kerf_used(self):
        plans = plan([1000, 1000], [2010], 10)
        summary = summarize(plans, 10)

        self.assertEqual(summary.total_kerf_loss, 10)
        self.assertEqual(summary.total_used, 2010)
        self.assertEqual(summary.efficiency, 100.0)
        self.assertIn("Perda de corte (kerf): 10mm", summary.summary)

    def test_empty_plan_list(self):
        summary = summarize([], 0)

        self.assertEqual(summary.total_stock_used, 0)
        self.assertEqual(summary.total_length, 0)
        self.assertEqual(summary.efficiency, 0)
        self.assertEqual(summary.stock_usage, [])


class TestOptimize(unittest.TestCase):

    def test_optimize_from_text_input(self):
        request = OptimizationRequest(
            cuts_input="1000x5", stock_lengths=[3000], kerf=0, order_number="PED-1"
        )
        result = CutPlanner().optimize(request)

        self.assertEqual(result.order_number, "PED-1")
        self.assertEqual(result.kerf, 0)
        self.assertEqual(len(result.plans), 2)
        self.assertEqual(result.summary.total_stock_used, 2)
        self.assertEqual(result.summary.efficiency, 83.33)
        self.assertGreaterEqual(result.processing_time, 0)

    def test_optimize_generates_order_number(self):
        request = OptimizationRequest(required_cuts=[1000], stock_lengths=[3000])
        result = CutPlanner(kerf_width=3).optimize(request)

        self.assertRegex(result.order_number, re.compile(r"^CUT-\d{8}-\d{4}$"))
        self.assertEqual(result.kerf, 3)

    def test_optimize_without_usable_cuts(self):
        request = OptimizationRequest(cuts_input="abc, -5", stock_lengths=[3000])

        with self.assertRaises(InvalidInputError):
            CutPlanner().optimize(request)

    def test_optimize_propagates_insufficient_stock(self):
        request = OptimizationRequest(required_cuts=[2500], stock_lengths=[2000])

        with self.assertRaises(InsufficientStockError):
            CutPlanner().optimize(request)


if __name__ == '__main__':
    unittest.main()
