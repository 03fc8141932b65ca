# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The harness core.

Subsystems:
  - models: work items, verdicts, running results
  - source: the ItemSource contract and the single-item source
  - ignore: ids that are counted but never built
  - builder: rustc invocation, scratch area, artifact cleanup
  - cancellation: interrupt handling and the finished rendezvous
  - loop: pagination and per-item processing
  - report: result aggregation and the cargo-test style report
  - session: runs the loop on a worker while the main thread handles SIGINT
"""
