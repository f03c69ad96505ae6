from cobra.io import load_model
import numpy as np
import logging
import mcadre as mc

logging.basicConfig(level=logging.INFO)
model = load_model('e_coli_core')
# random expression scores as a stand-in for data from a tissue
rng = np.random.default_rng(1)
gene_scores = {g.id: rng.random() for g in model.genes}

table = mc.parse_gprs(model)
clause_scores = mc.combine_clause_scores(table, gene_scores)
E_X = mc.calc_expr_evidence(model, clause_scores)
core, candidates = mc.rank_reactions(model, E_X)
# keep the biomass reaction and the glucose uptake
core += [r for r in ['BIOMASS_Ecoli_core_w_GAM', 'EX_glc__D_e'] if r not in core]
candidates = [r for r in candidates if r not in core]
print(str(len(core)) + ' core reactions, ' + str(len(candidates)) + ' candidates for removal.')

config = mc.SolverConfig(solver='glpk')
inactive = mc.find_inactive_rxns(model, config=config)
with model:
    model.remove_reactions(inactive)
    # core reactions without flux capacity are gone, the consistency check only accepts present ones
    core = [r for r in core if r in model.reactions]
    pruned = []
    for r in candidates[:20]:
        if r not in model.reactions:
            continue
        with mc.DisableLogger():
            inactive, t, result = mc.check_model_consistency(model, r, core, config=config)
        if result == mc.NO_CORE_DEAD_END and not set(inactive).intersection(core):
            model.remove_reactions([r] + inactive)
            pruned += [r] + inactive
            print('Removed ' + r + ' and ' + str(len(inactive)) + ' reactions that became inactive (' +
                  format(t, '1.2f') + ' s).')
    print(str(len(pruned)) + ' reactions pruned, ' + str(len(model.reactions)) + ' remaining.')
