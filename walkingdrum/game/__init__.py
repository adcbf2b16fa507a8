"""Game model: entity types, components, transactional creation and the sweep."""