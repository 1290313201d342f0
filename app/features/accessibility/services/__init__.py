"""
Accessibility Services

Organized by pipeline stage, in the order a batch flows through them:

1. aggregation/ - raw audit output to suggestion candidates (pure, no I/O)
   - issue_aggregator.py: URL/source split, WCAG rule formatting, per-element candidates

2. opportunities/ - one long-lived opportunity per site and type
   - opportunity_templates.py: one template per opportunity type
   - opportunity_reconciler.py: reuse the active opportunity or create one
   - individual_opportunities.py: batch entry point and per-type metrics

3. suggestions/ - keep stored suggestions in step with the latest audit
   - suggestion_policy.py: key, new-suggestion mapping, merge rules
   - suggestion_sync.py: outdated / merged / new reconciliation against the store

4. remediation/ - exchange with the AI remediation service
   - dispatcher.py: one request per page over the message queue
   - guidance_receiver.py: merge guidance replies into suggestions
   - metrics.py: sent/received counters in Redis

Batches for the same site must be serialized by the caller.
"""
